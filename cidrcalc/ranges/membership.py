"""Label lookup for single addresses.

The lookup is a linear scan over every entry in the store. At the size of the
published block list (hundreds of entries) this is fast enough; a prefix tree
would be the next step for much larger lists.
"""

from __future__ import annotations

from ipaddress import IPv4Address, IPv6Address, ip_address
from typing import List, Optional, Union

from .models import RangeEntryStore

Address = Union[IPv4Address, IPv6Address]


def lookup(store: Optional[RangeEntryStore], address: Union[str, Address]) -> List[str]:
    """Return the labels whose blocks contain ``address``.

    Membership is decided per label: an address belongs to a label if any
    entry under that label contains it, so duplicate entries collapse to a
    single occurrence.

    Args:
        store: Entry store to search; None is treated as an empty store
        address: Address object or its text form

    Returns:
        Alphabetically sorted unique labels. An empty list means the address
        is not in any known block, including when the store is missing or the
        address does not parse.
    """
    if store is None:
        return []

    if isinstance(address, str):
        try:
            address = ip_address(address)
        except ValueError:
            return []
    elif not isinstance(address, (IPv4Address, IPv6Address)):
        return []

    # Networks of the other family never contain the address.
    labels = {entry.label for entry in store if address in entry.network}
    return sorted(labels)
