class SwayFocusError(Exception):
    pass


class ArgumentError(SwayFocusError):
    """Malformed or empty target specification"""


class ConfigError(ArgumentError):
    """settings.json could not be read or has the wrong shape"""


class RetrievalError(SwayFocusError):
    """The tree could not be fetched from the window manager"""


class ParseError(SwayFocusError):
    """The tree snapshot does not match the expected schema"""


class DispatchError(SwayFocusError):
    """The focus command could not be delivered"""


class NoFocusCommand(SwayFocusError):
    """
    The resolved leaf has no focus command. The search never ends at the root,
    so this means the tree and the search disagree.
    """
