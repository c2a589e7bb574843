class PreflightError(RuntimeError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class SchemeError(RuntimeError):
    def __init__(self, path: object, reason: str):
        super().__init__(f"{path}: {reason}")
        self.path = path
