"""
Customized exceptions that allow code to handle error conditions arising while defining a data
service's configuration, building diagnostic digests, and comparing them.
"""

class WDSException(Exception):
    """
    a base class for all exceptions raised by the wds package
    """

    def __init__(self, message: str=None):
        if not message:
            message = "Unspecified data service configuration problem"
        super(WDSException, self).__init__(message)


class ConfigurationException(WDSException):
    """
    an exception indicating that configuration data could not be loaded or is otherwise invalid
    """

    def __init__(self, message: str=None, cause: Exception=None):
        if not message:
            message = "Configuration error"
            if cause:
                message += ": " + str(cause)
        super(ConfigurationException, self).__init__(message)
        self.cause = cause


class DefinitionError(WDSException, ValueError):
    """
    an exception indicating that an attempt to define part of a data service's configuration
    (a node, format, vocabulary, set, block, or ruleset) failed.  Such errors are configuration
    authoring bugs and are not expected to be recoverable.

    This class serves as a base class for more specific definition errors.
    """

    def __init__(self, message: str=None, path: str=None, key: str=None, where: str=None):
        """
        create the exception

        :param str message:  an explanation of what is wrong with the definition
        :param str path:     the node path (or entity name) being defined
        :param str key:      the attribute key at issue (if relevant)
        :param str where:    the source location of the defining call, as in "line N of FILE"
        """
        if not message:
            message = "Invalid definition"
            if path:
                message += f" of '{path}'"
            if key:
                message += f" ({key})"
        if where:
            message += f" (at {where})"
        super(DefinitionError, self).__init__(message)
        self.path = path
        self.key = key
        self.where = where


class DuplicatePath(DefinitionError):
    """
    an error indicating that a node path was defined more than once
    """

    def __init__(self, path: str, prevwhere: str=None, where: str=None):
        """
        create the exception

        :param str path:       the path that was redefined
        :param str prevwhere:  the source location of the earlier definition
        :param str where:      the source location of the offending definition
        """
        message = f"'{path}' was already defined"
        if prevwhere:
            message += f" at {prevwhere}"
        super(DuplicatePath, self).__init__(message, path, None, where)
        self.prevwhere = prevwhere


class DuplicateDefinition(DefinitionError):
    """
    an error indicating that a named entity (format, vocabulary, set, block, or ruleset) or a
    value within a set was defined more than once
    """
    pass


class InvalidPath(DefinitionError):
    """
    an error indicating that a node path is malformed or cannot be defined yet
    """

    def __init__(self, path, message: str=None, where: str=None):
        if not message:
            message = f"invalid path '{path}'"
        super(InvalidPath, self).__init__(message, path, None, where)


class UnknownAttribute(DefinitionError):
    """
    an error indicating that a definition included an attribute that is not recognized for the
    type of entity being defined
    """

    def __init__(self, key: str, path: str=None, entity: str="node", where: str=None):
        message = f"unknown {entity} attribute '{key}'"
        if path:
            message += f" in definition of '{path}'"
        super(UnknownAttribute, self).__init__(message, path, key, where)
        self.entity = entity


class InvalidAttributeValue(DefinitionError):
    """
    an error indicating that an attribute value does not have the syntax required by its kind
    """

    def __init__(self, key: str, value, path: str=None, message: str=None, where: str=None):
        if not message:
            message = f"({key}) invalid value '{value}'"
            if path:
                message += f" for '{path}'"
        super(InvalidAttributeValue, self).__init__(message, path, key, where)
        self.value = value


class StructuralConflict(DefinitionError):
    """
    an error indicating that a node's attributes are inconsistent with each other or with the
    rest of the data service's configuration (e.g. it names a role method that does not exist,
    or it sets both 'method' and 'file_dir').
    """
    pass


class DanglingReference(WDSException):
    """
    a (non-fatal) condition indicating that one configuration entity refers by name to another
    that does not exist.  Digest builders record these as error entries rather than raising them.
    """

    def __init__(self, category: str, name: str, context: str=None):
        """
        create the exception

        :param str category:  the type of thing referred to (e.g. "block", "set", "ruleset")
        :param str name:      the name that could not be resolved
        :param str context:   a description of where the reference was found
        """
        super(DanglingReference, self).__init__(f"unknown {category} '{name}'")
        self.category = category
        self.name = name
        self.context = context


class DigestError(WDSException):
    """
    an exception indicating a failure to load, merge, or compare diagnostic digests.

    This class serves as a base class for more specific digest errors.
    """
    pass


class NoDigest(DigestError):
    """
    an error indicating that an expected digest is absent or not a valid digest
    """

    def __init__(self, message: str=None, source: str=None):
        if not message:
            message = "No digest found"
            if source:
                message += " in " + source
        super(NoDigest, self).__init__(message)
        self.source = source


class IncompatibleDigest(DigestError):
    """
    an error indicating that digest streams that were to be merged describe different data
    services (or different versions of one)
    """
    pass


class UnknownDiagnosticParameter(WDSException):
    """
    an error indicating that a diagnostic request included a parameter or value that is not
    recognized.  The diagnostic operation is aborted, but this is not considered fatal.
    """

    def __init__(self, param: str, value: str=None, message: str=None):
        if not message:
            if value is not None:
                message = f"unknown value for '{param}': {value}"
            else:
                message = f"unknown parameter '{param}'"
        super(UnknownDiagnosticParameter, self).__init__(message)
        self.param = param
        self.value = value
