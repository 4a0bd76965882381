"""Controller modules used as dispatch namespaces in tests."""


class Output:
    """Stand-in for a host response: collects written text."""

    def __init__(self) -> None:
        self.written: list[str] = []

    def write(self, text: str) -> None:
        self.written.append(text)

    @property
    def text(self) -> str:
        return "".join(self.written)
