import logging

import coldstd.descriptors as descriptors

from coldstd.descriptors.checksum import descsum_check
from coldstd.key import DescriptorKeyError, XpubDerivable

from .errors import DescriptorParsingError

LOG = logging.getLogger(__name__)


def split_checksum(desc_str, strict=False):
    """Removes and check the provided checksum.
    If not told otherwise, this won't fail on a missing checksum.

    :param strict: whether to require the presence of the checksum.
    """
    desc_split = desc_str.split("#")
    if len(desc_split) != 2:
        if strict:
            raise DescriptorParsingError("Missing checksum")
        return desc_split[0]

    descriptor, checksum = desc_split
    if not descsum_check(desc_str):
        raise DescriptorParsingError(
            f"Checksum '{checksum}' is invalid for '{descriptor}'"
        )

    return descriptor


def parse_key(key_str):
    try:
        return XpubDerivable.from_str(key_str)
    except DescriptorKeyError as e:
        LOG.debug("Rejecting key expression '%s': %s", key_str, e.message)
        raise DescriptorParsingError(str(e))


def descriptor_from_str(desc_str, strict=False):
    """Parse a 'wpkh()' or key-only 'tr()' Output Script Descriptor from its string
    representation.

    :param strict: whether to require the presence of a checksum.
    """
    desc_str = split_checksum(desc_str, strict=strict)

    if desc_str.startswith("wpkh(") and desc_str.endswith(")"):
        return descriptors.Wpkh(parse_key(desc_str[5:-1]))

    if desc_str.startswith("tr(") and desc_str.endswith(")"):
        if "," in desc_str:
            LOG.debug("Rejecting Taproot descriptor with a tree: '%s'", desc_str)
            raise DescriptorParsingError(
                f"Taproot script path is not supported: '{desc_str}'"
            )
        return descriptors.TrKey(parse_key(desc_str[3:-1]))

    LOG.debug("Rejecting unknown descriptor: '%s'", desc_str)
    raise DescriptorParsingError(f"Unknown descriptor fragment: {desc_str}")
