"""Python counterpart of the browser form client.

Modules
-------
validation
    Form trimming/validation and random seed generation.
client
    :class:`PostcardClient`, an httpx client for ``/api/generate``.
display
    :class:`CardDisplay`, which keeps exactly one generated card on disk.
"""

from postcards.ui.client import (
    ClientBusyError,
    ClientError,
    PostcardClient,
    ServerError,
    ServerUnreachableError,
)
from postcards.ui.display import CardDisplay
from postcards.ui.validation import CardForm, make_random_seed, validate_form

__all__ = [
    "CardDisplay",
    "CardForm",
    "ClientBusyError",
    "ClientError",
    "PostcardClient",
    "ServerError",
    "ServerUnreachableError",
    "make_random_seed",
    "validate_form",
]
