"""A second namespace declaring a controller with the same name."""

from wren import Controller


class SimpleController(Controller):
    def time(self) -> None:
        self.context.write("admin")
