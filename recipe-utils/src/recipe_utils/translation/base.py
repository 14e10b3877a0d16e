"""Interface of the batch translation backends."""

from abc import ABC, abstractmethod
from typing import List


class Translator(ABC):
    """Translates batches of sentences between two languages."""

    @abstractmethod
    def translate_batch(
        self, sentences: List[str], source_tag: str, target_tag: str
    ) -> List[str]:
        """Translate sentences, keeping their order.

        Args:
            sentences: Sentences to translate.
            source_tag: Language tag of the sentences, e.g. "en".
            target_tag: Language tag to translate to, e.g. "nl".

        Returns:
            The translations, ``result[i]`` being the translation of
            ``sentences[i]``, or an empty list if the translation failed.
        """
        pass
