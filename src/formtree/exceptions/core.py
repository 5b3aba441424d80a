"""
Exception classes for the formtree binding engine.

These exceptions report programmer misuse of the binding API (configuration
errors). They are raised synchronously by the offending operation. Data
problems found by validators are never raised; they are collected as
``FieldError`` values instead.
"""


class FormTreeError(Exception):
    """Base exception for all formtree configuration errors."""

    pass


class NotAnArrayError(FormTreeError, TypeError):
    """Raised when an array operation is used on a node that is not an array."""

    def __init__(self, node_name: str):
        """
        Initialize the exception.

        Params:
            node_name: Path of the node the operation was invoked on
        """
        self.node_name = node_name
        super().__init__(f"Model is not an array: '{node_name}'")


class NotAnArrayItemError(FormTreeError, TypeError):
    """Raised when an item operation is used on a node outside an array."""

    def __init__(self, node_name: str):
        """
        Initialize the exception.

        Params:
            node_name: Path of the node the operation was invoked on
        """
        self.node_name = node_name
        super().__init__(f"Model is not an array item: '{node_name}'")


class UndefinedValueError(FormTreeError, TypeError):
    """Raised when None is written where a value is mandatory."""

    def __init__(self, node_name: str):
        """
        Initialize the exception.

        Params:
            node_name: Path of the node receiving the undefined value
        """
        self.node_name = node_name
        location = f"'{node_name}'" if node_name else "the root value"
        super().__init__(f"Unexpected undefined value for {location}")


class UnknownBinderError(FormTreeError):
    """Raised when navigating to a model that belongs to another binder."""

    def __init__(self, model_name: str):
        """
        Initialize the exception.

        Params:
            model_name: Path of the model within its own binder
        """
        self.model_name = model_name
        super().__init__(f"Unknown binder for model '{model_name}'")


class FieldTypeError(FormTreeError):
    """Raised when a field type cannot be mapped to a model."""

    def __init__(self, field_tag: str, message: str = "has no field type"):
        """
        Initialize the exception.

        Params:
            field_tag: Qualified name of the field with the type issue
            message: Specific error message
        """
        self.field_tag = field_tag
        super().__init__(f"Field '{field_tag}' {message}")
