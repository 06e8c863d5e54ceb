from __future__ import annotations

import logging
from typing import Optional

from .brand_assistant import BrandAssistant
from .errors import ValidationError
from .generation_client import CreativeGenerationClient
from .history import ConfigHistory
from .models import CampaignConfig, GenerationOutcome, Platform
from .orchestrator import GenerationOrchestrator, ProgressCallback


class EditingSession:
    """
    One user's editing session over a campaign configuration.

    Every edit is committed to a ConfigHistory so it can be undone; asset
    edits made through the assistant (background removal, stylizing) are
    committed the same way. Generation always runs against the snapshot at
    the history cursor.
    """

    def __init__(
            self,
            initial_config: CampaignConfig,
            client: CreativeGenerationClient,
            *,
            assistant: Optional[BrandAssistant] = None,
            orchestrator: Optional[GenerationOrchestrator] = None,
    ) -> None:
        self.history: ConfigHistory[CampaignConfig] = ConfigHistory(initial_config)
        self.assistant = assistant
        self.orchestrator = orchestrator or GenerationOrchestrator(client)
        self.last_outcome: Optional[GenerationOutcome] = None

    @property
    def config(self) -> CampaignConfig:
        return self.history.current()

    # -- edits --------------------------------------------------------------

    def update_brand(self, **changes) -> CampaignConfig:
        return self.history.commit(lambda prev: prev.with_brand(**changes))

    def update_campaign(self, **changes) -> CampaignConfig:
        return self.history.commit(lambda prev: prev.with_campaign(**changes))

    def toggle_platform(self, platform: Platform) -> CampaignConfig:
        """Select the platform if it is not selected yet, otherwise drop it."""

        def toggle(prev: CampaignConfig) -> CampaignConfig:
            selected = prev.campaign_details.platforms
            if any(p.name == platform.name for p in selected):
                remaining = tuple(p for p in selected if p.name != platform.name)
            else:
                remaining = selected + (platform,)
            return prev.with_campaign(platforms=remaining)

        return self.history.commit(toggle)

    def undo(self) -> CampaignConfig:
        return self.history.undo()

    def redo(self) -> CampaignConfig:
        return self.history.redo()

    def can_undo(self) -> bool:
        return self.history.can_undo()

    def can_redo(self) -> bool:
        return self.history.can_redo()

    def reset(self) -> CampaignConfig:
        return self.history.clear()

    # -- assistant-backed edits ---------------------------------------------

    def _require_assistant(self) -> BrandAssistant:
        if self.assistant is None:
            raise RuntimeError("This session was created without a brand assistant.")
        return self.assistant

    async def remove_product_background(self) -> CampaignConfig:
        photo = self.config.campaign_details.product_photo
        if photo is None:
            raise ValidationError("Upload a product photo before removing its background.")
        edited = await self._require_assistant().remove_background(photo)
        return self.history.commit(lambda prev: prev.with_campaign(product_photo=edited))

    async def stylize_product_photo(self) -> CampaignConfig:
        config = self.config
        photo = config.campaign_details.product_photo
        logo = config.brand_assets.logo
        if photo is None or logo is None:
            raise ValidationError("A product photo and a logo are required to stylize the photo.")
        edited = await self._require_assistant().stylize_product_photo(
            photo, logo, config.brand_assets.color_palette
        )
        return self.history.commit(lambda prev: prev.with_campaign(product_photo=edited))

    # -- generation ---------------------------------------------------------

    async def generate(self, on_progress: Optional[ProgressCallback] = None) -> GenerationOutcome:
        snapshot = self.config
        logging.info(
            "Generating creatives for brand '%s' from snapshot %d of %d.",
            snapshot.brand_assets.brand_name,
            self.history.cursor + 1,
            len(self.history),
        )
        outcome = await self.orchestrator.run(snapshot, on_progress)
        self.last_outcome = outcome
        return outcome
