"""Step 3: pick topics of interest."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Set

from loguru import logger
from pydantic import ValidationError

from airlite.http import ApiConnectionError, ApiError, extract_error_message
from airlite.repositories import TopicRepository

from ...errors import CONNECTIVITY_MESSAGE
from ...schemas import StepResult, Topic
from ..wizard_service import WizardStep

TOPICS_LOAD_FAILED = "Failed to fetch topics from the server."
INTERESTS_SAVE_FAILED = "Failed to save your interests."


class TopicsStep(WizardStep):
    name = "topics"
    title = "Personalize Your Feed"
    skippable = False

    def __init__(self, topics: TopicRepository):
        self.repo = topics
        self.topics: List[Topic] = []
        self.selected: Set[str] = set()
        self.load_error: Optional[str] = None
        self.submit_error: Optional[str] = None
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    async def load(self, force: bool = False) -> List[Topic]:
        """Fetch the topic list on first use. A failed load can be retried."""
        if self._loaded and not force:
            return self.topics

        self.load_error = None
        try:
            data = await self.repo.list_topics()
        except ApiConnectionError:
            self.load_error = CONNECTIVITY_MESSAGE
            return self.topics
        except ApiError as e:
            logger.warning(f"Topic list request failed ({e.status}): {e.message}")
            self.load_error = TOPICS_LOAD_FAILED
            return self.topics

        topics = []
        for item in data:
            try:
                topics.append(Topic.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed topic {item!r}: {e}")
        self.topics = topics
        self._loaded = True
        logger.debug(f"Loaded {len(topics)} topics")
        return self.topics

    def toggle(self, code: str) -> bool:
        """Flip selection of ``code``; returns whether it is now selected."""
        if code in self.selected:
            self.selected.discard(code)
            return False
        self.selected.add(code)
        return True

    async def submit(self, form_data: Dict[str, Any]) -> StepResult:
        self.submit_error = None
        codes = sorted(self.selected)
        try:
            await self.repo.save_interests(codes)
        except ApiConnectionError:
            self.submit_error = CONNECTIVITY_MESSAGE
        except ApiError as e:
            self.submit_error = extract_error_message(e.payload, INTERESTS_SAVE_FAILED)
        if self.submit_error:
            return StepResult.declined(self.submit_error)
        return StepResult.accepted({"topicCodes": codes})
