class FilterError(Exception):
    """
    Base exception for every error raised by the filter engine.

    Attributes:
        message -- explanation of the error
        code -- stable machine readable error code
        context -- optional mapping with details about the failure
    """

    code = "FILTER_ERROR"

    def __init__(self, message, code=None, context=None):
        self.message = message
        if code is not None:
            self.code = code
        self.context = context or {}
        super().__init__(self.message)

    def to_dict(self):
        return {
            "name": type(self).__name__,
            "message": self.message,
            "code": self.code,
            "context": self.context,
        }

    def __str__(self):
        return self.message


class InvalidInputError(FilterError):
    """
    Exception raised when an entry point receives something that is not a collection
    (or, for the lazy variants, not an iterable).
    """

    code = "INVALID_INPUT"

    def __init__(self, message, function_name=None, received_type=None):
        self.function_name = function_name
        self.received_type = received_type
        super().__init__(message, context={
            "function_name": function_name,
            "received_type": received_type,
        })

    def __str__(self):
        details = []
        if self.function_name is not None:
            details.append(f"function={self.function_name}")
        if self.received_type is not None:
            details.append(f"received={self.received_type}")

        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message


class InvalidExpressionError(FilterError):
    """
    Exception raised when a filter expression is malformed: wrong shape, unknown
    operator or an operator argument of the wrong type.
    """

    code = "INVALID_EXPRESSION"

    def __init__(self, message, expression=None, operator=None, validation_errors=None):
        self.expression = expression
        self.operator = operator
        self.validation_errors = list(validation_errors or [])
        super().__init__(message, context={
            "operator": operator,
            "validation_errors": self.validation_errors,
        })

    def __str__(self):
        details = []
        if self.operator is not None:
            details.append(f"operator={self.operator}")
        if self.validation_errors:
            details.append(f"errors={'; '.join(self.validation_errors)}")

        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message


class ConfigurationError(FilterError):
    """
    Exception raised when filter options are invalid, e.g. a non-positive chunk size.
    """

    code = "CONFIGURATION_ERROR"

    def __init__(self, message, option=None, value=None):
        self.option = option
        self.value = value
        super().__init__(message, context={"option": option, "value": value})

    def __str__(self):
        if self.option is not None:
            return f"{self.message} (option={self.option}, value={self.value!r})"
        return self.message


class GeospatialError(FilterError):
    """
    Exception raised when a geospatial operator argument holds a malformed point,
    bounding box or polygon.
    """

    code = "GEOSPATIAL_ERROR"

    def __init__(self, message, operator=None, coordinates=None):
        self.operator = operator
        self.coordinates = coordinates
        super().__init__(message, context={"operator": operator, "coordinates": coordinates})

    def __str__(self):
        if self.operator is not None:
            return f"{self.message} (operator={self.operator})"
        return self.message


class TypeMismatchError(FilterError):
    """
    Exception raised when an ordered operator ($gt, $gte, $lt, $lte) receives an
    argument that has no ordering, such as a string or a mapping.
    """

    code = "TYPE_MISMATCH"

    def __init__(self, message, expected=None, received=None, operator=None):
        self.expected = expected
        self.received = received
        self.operator = operator
        super().__init__(message, context={
            "expected": expected,
            "received": received,
            "operator": operator,
        })

    def __str__(self):
        details = []
        if self.operator is not None:
            details.append(f"operator={self.operator}")
        if self.expected is not None:
            details.append(f"expected={self.expected}")
        if self.received is not None:
            details.append(f"received={self.received}")

        if details:
            return f"{self.message} ({', '.join(details)})"
        return self.message
