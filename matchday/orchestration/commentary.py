"""Fan-out of one commentary prompt to every configured provider"""

from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Any, Callable, List, Sequence

from matchday.data.models import Dossier
from matchday.data.variants import SportVariant
from matchday.prompts import commentary_prompt
from matchday.utils.errors import CommentaryError
from matchday.utils.llm import get_llm_client
from matchday.utils.logging import get_logger

logger = get_logger("orchestration.commentary")


@dataclass
class CommentaryProvider:
    """A named prompt -> response callable"""
    name: str
    generate: Callable[[str], Any]


class CommentaryAggregator:
    """Sends the same prompt to all providers at once; all must succeed"""

    def __init__(self, providers: Sequence[CommentaryProvider]):
        if not providers:
            raise ValueError("At least one commentary provider is required")
        self.providers = list(providers)

    def generate(self, dossier: Dossier, variant: SportVariant) -> List[Any]:
        """Commentary for a dossier, one response per provider in configuration order"""
        prompt = commentary_prompt(dossier, variant)
        logger.info(f"Requesting commentary for {dossier.match_key} from {len(self.providers)} providers")
        return self.dispatch(prompt)

    def dispatch(self, prompt: str) -> List[Any]:
        """Run every provider concurrently and wait for all of them to settle"""
        with ThreadPoolExecutor(max_workers=len(self.providers)) as executor:
            futures = [executor.submit(provider.generate, prompt) for provider in self.providers]
            wait(futures)

        for provider, future in zip(self.providers, futures):
            error = future.exception()
            if error is not None:
                logger.error(f"Commentary provider {provider.name} failed: {error}")
                raise CommentaryError(f"Commentary provider {provider.name} failed: {error}") from error

        return [future.result() for future in futures]


def build_providers(models: Sequence[str]) -> List[CommentaryProvider]:
    """One provider per configured model, in order"""
    return [CommentaryProvider(name=model, generate=get_llm_client(model).generate) for model in models]
