"""Parsing of devcontainer mount strings."""

from ..models.mount import MountSpec, MountType
from ..services.exceptions import MountParseError

_MOUNT_KEYS = ('source', 'target', 'type', 'consistency')


def parse_colon_mount(value: str) -> MountSpec:
    """Parse `SRC:DST[:...]` into a bind mount. Extra fields are ignored."""
    parts = value.split(':')
    if len(parts) < 2:
        raise MountParseError(f"Invalid mount point: {value}")

    return MountSpec(source=parts[0], target=parts[1], type=MountType.BIND)


def parse_comma_mount(value: str) -> MountSpec:
    """Parse `key=value,key=value,...` into a mount.

    Recognized keys are source, target, type and consistency. Keys may be
    omitted, but unknown keys and segments without `=` are rejected.
    """
    attrs = {}

    for segment in value.split(','):
        name, sep, attr_value = segment.partition('=')
        if not sep:
            raise MountParseError(f"Invalid segment '{segment}' for mount point: {value}")

        if name in ('source', 'target', 'consistency'):
            attrs[name] = attr_value
        elif name == 'type':
            try:
                attrs['type'] = MountType(attr_value)
            except ValueError:
                raise MountParseError(
                    f"Invalid mount point type '{attr_value}' for mount point: {value}"
                ) from None
        else:
            raise MountParseError(f"Invalid attr '{name}' for mount point: {value}")

    return MountSpec(**attrs)


def parse_mount(value: str) -> MountSpec:
    """Parse a mount string in either the comma or the colon syntax.

    A string with a comma, or a single `key=value` pair with a known key,
    is read in the comma syntax.
    """
    key, sep, _ = value.partition('=')
    if ',' in value or (sep and key in _MOUNT_KEYS):
        return parse_comma_mount(value)
    return parse_colon_mount(value)
