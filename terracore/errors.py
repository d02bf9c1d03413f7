class InitError(Exception):
    """Raised when the definition tables or header layout cannot be loaded."""

    def __init__(self, message, reason=""):
        self.message = message
        self.reason = reason
        super().__init__(f"{message}: {reason}" if reason else message)


class LoadError(Exception):
    """Base class of every decode failure.

    `stage` names where the failure happened ("validation", a section name,
    or "player") so callers can report it. It is filled in by the decoder
    when the error crosses a stage boundary.
    """

    def __init__(self, message, stage=None):
        self.message = message
        self.stage = stage
        super().__init__(message)

    def __str__(self):
        if self.stage:
            return f"[{self.stage}] {self.message}"
        return self.message


class UnsupportedVersionTooNew(LoadError):
    def __init__(self, version, highest):
        self.version = version
        super().__init__(f"Unsupported map version: {version} (newest supported is {highest})", "validation")


class UnsupportedVersionTooOld(LoadError):
    def __init__(self, version, minimum):
        self.version = version
        super().__init__(f"We no longer support maps this old: {version} (oldest supported is {minimum})", "validation")


class BadMagic(LoadError):
    def __init__(self, found, player=False):
        self.found = found
        self.player = player
        kind = "player map" if player else "map"
        super().__init__(f"Not a relogic {kind} file (magic {found!r})", "player" if player else "validation")


class BadFileType(LoadError):
    def __init__(self, found, expected, player=False):
        self.found = found
        self.expected = expected
        self.player = player
        kind = "player map" if player else "map"
        super().__init__(f"Not a {kind} file (type {found}, expected {expected})", "player" if player else "validation")


class TruncatedData(LoadError):
    def __init__(self, offset, wanted, available):
        self.offset = offset
        self.wanted = wanted
        self.available = available
        super().__init__(f"Unexpected end of data at offset {offset}: wanted {wanted} bytes, {available} available")


class BadSectionOffset(LoadError):
    def __init__(self, message):
        super().__init__(message, "validation")


class CorruptData(LoadError):
    pass


class DecompressionError(LoadError):
    def __init__(self, message):
        super().__init__(message, "player")


class DecodeCancelled(LoadError):
    def __init__(self, stage=None):
        super().__init__("Decode cancelled", stage)
