# quack_companion/services/guidelines.py
import logging

from ..schemas.guideline import Guideline
from .auth import AuthService
from .notifications import Notifier
from .quack import QuackClient
from .session import GUIDELINES_KEY, SessionStore

logger = logging.getLogger(__name__)


class GuidelineService:
    """Guideline commands backed by a local cache of the remote collection."""

    def __init__(self, session: SessionStore, client: QuackClient, auth: AuthService, notifier: Notifier):
        self.session = session
        self.client = client
        self.auth = auth
        self.notifier = notifier

    def _get_cache(self) -> list[Guideline]:
        return [Guideline.model_validate(item) for item in self.session.get(GUIDELINES_KEY, [])]

    def _set_cache(self, guidelines: list[Guideline]) -> None:
        self.session.update(GUIDELINES_KEY, [g.model_dump(mode="json") for g in guidelines])

    def _get_item(self, guidelines: list[Guideline], index: int) -> Guideline:
        if not 0 <= index < len(guidelines):
            raise IndexError(f"No guideline at index {index}")
        return guidelines[index]

    async def pull_guidelines(self) -> list[Guideline]:
        guidelines = await self.client.fetch_guidelines(self.auth.credentials())
        self._set_cache(guidelines)
        logger.info(f"Pulled {len(guidelines)} guidelines")
        return guidelines

    def list_guidelines(self) -> list[Guideline]:
        return self._get_cache()

    async def create_guideline(self, content: str) -> Guideline:
        content = content.strip()
        if not content:
            raise ValueError("Guideline content must not be empty")
        guideline = await self.client.post_guideline(content, self.auth.credentials())
        self._set_cache(self._get_cache() + [guideline])
        self.notifier.show_info(f"Guideline {guideline.id} created")
        return guideline

    async def edit_guideline(self, index: int, content: str) -> Guideline:
        content = content.strip()
        if not content:
            raise ValueError("Guideline content must not be empty")
        guidelines = self._get_cache()
        current = self._get_item(guidelines, index)
        updated = await self.client.patch_guideline(current.id, content, self.auth.credentials())
        guidelines[index] = updated
        self._set_cache(guidelines)
        return updated

    async def remove_guideline(self, index: int) -> Guideline:
        guidelines = self._get_cache()
        current = self._get_item(guidelines, index)
        deleted = await self.client.delete_guideline(current.id, self.auth.credentials())
        self._set_cache([g for g in guidelines if g.id != deleted.id])
        self.notifier.show_info(f"Guideline {deleted.id} deleted")
        return deleted
