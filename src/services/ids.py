import random
import string

from src.schemas.contact import COLORS


class RecordGenerator:
    """
    Source of every random value a record gets at creation: ids and avatar colors.

    Pass a seed to make the sequence reproducible.
    """
    alphabet = string.digits + string.ascii_lowercase

    def __init__(self, seed: int | None = None):
        self.random = random.Random(seed)

    def new_id(self, length: int = 9) -> str:
        return "".join(self.random.choice(self.alphabet) for _ in range(length))

    def unique_id(self, taken) -> str:
        """
        Draws ids until one is not in ``taken``.

        :param taken: Ids already in use.
        :type taken: Container[str]
        :return: A fresh id.
        :rtype: str
        """
        candidate = self.new_id()
        while candidate in taken:
            candidate = self.new_id()
        return candidate

    def color(self) -> str:
        return self.random.choice(COLORS)
