class ConfigurationError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigurationError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class InvalidArgument(ValueError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
