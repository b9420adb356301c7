"""
Check-writing wizard: compose review suggestions and append them to a talk-page section.

Steps:
    0  compose    chapters of (quote, suggestion) pairs, optionally loaded from annotations
    1  edit       free-form wikitext draft, seeded from the chapters
    2  preview    section baseline read + rendered fragment
    3  diff       baseline vs. baseline + fragment, then commit

Network results are applied to the step that is current when they arrive,
not the one that requested them; results of a superseded request are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from bs4 import Tag

from review_service.api.sections import EditResult, SectionEditClient
from review_service.dialog import DialogRegistry, registry as default_registry
from review_service.imports import build_composition, chapters_from_groups, load_import_file, parse_import_payload
from review_service.notify import Notifier, NullNotifier
from review_service.settings import get_settings
from review_service.target import SectionTarget, resolve_section_target
from review_service.wizard.steps import StepMachine, next_tick
from review_service.wizard.surfaces import ContentSurface
from wikireview_core.errors import (
    EmptyImportError,
    InvalidFormatError,
    ReviewToolError,
    ValidationError,
)
from wikireview_core.messages import message
from wikireview_core.models import Chapter, Composition
from wikireview_core.ordering import OrderKeyComparator, compare_order_keys
from wikireview_core.store import AnnotationStore
from wikireview_core.wikitext import build_diff_lines, build_review_wikitext

logger = logging.getLogger(__name__)

COMPOSE_STEP = 0
EDIT_STEP = 1
PREVIEW_STEP = 2
DIFF_STEP = 3
TOTAL_STEPS = 4


@dataclass(frozen=True)
class PreviewBundle:
    fragment: str
    # what actually gets appended: a blank line, then the fragment
    append_suffix: str


class CheckWritingWizard:
    def __init__(
        self,
        sections: SectionEditClient,
        *,
        article_title: str,
        heading: Tag | str | None = None,
        store: AnnotationStore | None = None,
        notifier: Notifier | None = None,
        registry: DialogRegistry | None = None,
        comparator: OrderKeyComparator = compare_order_keys,
        summary: str | None = None,
        user_name: str | None = None,
    ) -> None:
        self.sections = sections
        self.article_title = article_title
        self.pending_heading = heading
        self.store = store
        self.notifier = notifier or NullNotifier()
        self.registry = registry or default_registry
        self.comparator = comparator
        self.summary = summary
        self.user_name = user_name

        self.is_open = False
        self.is_saving = False
        self.is_loading_annotations = False
        self.composition = Composition()
        self.edited_draft = ""
        self.preview_wikitext = ""
        self.preview_html = ""
        self.existing_section_text = ""
        self.pending_new_section_text = ""
        self.diff_html = ""
        self.diff_lines: list[str] = []

        self.preview_surface = ContentSurface("preview")
        self.diff_surface = ContentSurface("diff")
        self._generation = {"preview": 0, "diff": 0}

        self.machine = StepMachine(
            TOTAL_STEPS,
            handlers={
                EDIT_STEP: self.prepare_edit_draft,
                PREVIEW_STEP: self.prepare_preview,
                DIFF_STEP: self.prepare_diff,
            },
            ensure_visible=self.ensure_step_content_visible,
        )
        self.machine.on_change(self._on_step_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def current_step(self) -> int:
        return self.machine.current_step

    @property
    def title(self) -> str:
        return message("dialog-title-prefix") + self.article_title + message("dialog-title-suffix")

    def show(self) -> "CheckWritingWizard":
        self.registry.acquire(self)
        self.machine.reset()
        self.is_open = True
        return self

    def close(self) -> None:
        self.teardown()
        self.registry.release(self)

    def teardown(self) -> None:
        self.is_open = False
        self.preview_surface.clear()
        self.diff_surface.clear()

    async def settle(self) -> None:
        await self.machine.settle()

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def on_primary_action(self) -> bool:
        """Next step, or commit on the last step. False when the commit failed."""
        if self.machine.advance():
            return True
        if self.is_saving:
            return False
        try:
            await self.save()
        except ReviewToolError:
            return False
        return True

    def on_default_action(self) -> bool:
        """Previous step, or close on the first step."""
        if self.machine.regress():
            return True
        self.close()
        return False

    def _on_step_change(self, previous: int, current: int) -> None:
        # leaving a step tears its view down
        if previous == PREVIEW_STEP:
            self.preview_surface.clear()
        elif previous == DIFF_STEP:
            self.diff_surface.clear()

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def add_chapter(self) -> Chapter:
        return self.composition.add_chapter()

    def remove_chapter(self, index: int) -> bool:
        return self.composition.remove_chapter(index)

    def add_suggestion(self, chapter_index: int) -> None:
        self.composition.add_suggestion(chapter_index)

    def remove_suggestion(self, chapter_index: int, suggestion_index: int) -> bool:
        return self.composition.remove_suggestion(chapter_index, suggestion_index)

    def build_wikitext(self) -> str:
        return build_review_wikitext(self.composition.chapters)

    def build_preview_bundle(self) -> PreviewBundle | None:
        fragment = (self.edited_draft or "").strip() or self.build_wikitext().strip()
        if not fragment:
            return None
        return PreviewBundle(fragment=fragment, append_suffix=f"\n\n{fragment}")

    def get_target(self) -> SectionTarget:
        return resolve_section_target(self.pending_heading, self.article_title)

    # ------------------------------------------------------------------
    # Step side effects
    # ------------------------------------------------------------------

    def prepare_edit_draft(self) -> None:
        self.edited_draft = self.build_wikitext().strip()

    async def prepare_preview(self) -> None:
        target = self.get_target()
        self.preview_html = ""
        self.preview_wikitext = ""
        self.pending_new_section_text = ""
        self.existing_section_text = ""
        self.diff_html = ""
        self.diff_lines = []
        self.preview_surface.clear()
        self.diff_surface.clear()

        bundle = self.build_preview_bundle()
        if bundle is None:
            return
        generation = self._bump("preview")
        self.preview_wikitext = bundle.fragment

        baseline = await self._fetch_baseline(target)
        if self._is_stale("preview", generation):
            return
        self.existing_section_text = baseline
        self.pending_new_section_text = baseline + bundle.append_suffix

        html = await self.sections.render_to_display_form(bundle.fragment, target.page_title)
        if self._is_stale("preview", generation):
            return
        self.preview_html = html or ""
        if self.preview_html and self.current_step == PREVIEW_STEP:
            await self.trigger_content_hooks("preview")

    async def prepare_diff(self) -> None:
        target = self.get_target()
        self.diff_html = ""
        self.diff_lines = []
        self.diff_surface.clear()

        bundle = self.build_preview_bundle()
        if bundle is None:
            return
        generation = self._bump("diff")
        self.preview_wikitext = bundle.fragment
        suffix = bundle.append_suffix

        if self.pending_new_section_text and self.pending_new_section_text == self.existing_section_text + suffix:
            # baseline unchanged since it was read for this exact fragment
            baseline = self.existing_section_text
        else:
            baseline = await self._fetch_baseline(target)
            if self._is_stale("diff", generation):
                return

        self.existing_section_text = baseline
        self.pending_new_section_text = baseline + suffix
        try:
            diff_html = await self.sections.compute_display_diff(baseline, baseline + suffix, target.page_title)
        except ReviewToolError as exc:
            logger.error("[ReviewTool] compare failed: %s", exc.to_log_message())
            diff_html = ""
        if self._is_stale("diff", generation):
            return

        self.diff_html = diff_html or ""
        if not self.diff_html:
            self.diff_lines = build_diff_lines(baseline, suffix)
        elif self.current_step == DIFF_STEP:
            await self.trigger_content_hooks("diff")

    async def _fetch_baseline(self, target: SectionTarget) -> str:
        if target.section_id is None:
            return ""
        try:
            fetched = await self.sections.retrieve_full_text(target.page_title, target.section_id)
        except ReviewToolError as exc:
            logger.error("[ReviewTool] retrieve_full_text failed: %s", exc.to_log_message())
            return ""
        return fetched.text or ""

    def _bump(self, kind: str) -> int:
        self._generation[kind] += 1
        return self._generation[kind]

    def _is_stale(self, kind: str, generation: int) -> bool:
        return generation != self._generation[kind]

    # ------------------------------------------------------------------
    # Content injection
    # ------------------------------------------------------------------

    async def ensure_step_content_visible(self) -> None:
        if self.current_step == PREVIEW_STEP and self.preview_html:
            await self.trigger_content_hooks("preview")
        elif self.current_step == DIFF_STEP and self.diff_html:
            await self.trigger_content_hooks("diff")

    async def trigger_content_hooks(self, kind: str) -> bool:
        """Inject cached HTML into the matching surface if that step is showing and the surface is empty."""
        await next_tick()
        if not self.is_open:
            return False
        if kind == "preview":
            html, step, surface = self.preview_html, PREVIEW_STEP, self.preview_surface
        else:
            html, step, surface = self.diff_html, DIFF_STEP, self.diff_surface
        if not html or self.current_step != step:
            return False
        return surface.inject(html)

    # ------------------------------------------------------------------
    # Loading annotations
    # ------------------------------------------------------------------

    async def load_annotations_into_form(self) -> bool:
        if self.is_loading_annotations:
            return False
        self.is_loading_annotations = True
        try:
            if not self.article_title:
                self.report_load_failure(message("load-no-page"))
                return False
            groups = self.store.groups(self.comparator) if self.store is not None else []
            if not groups:
                self.report_load_failure(message("load-empty"))
                return False
            chapters = chapters_from_groups(groups, message("annotation-fallback-chapter"), self.comparator)
            if not chapters:
                self.report_load_failure(message("load-empty-chapters"))
                return False
            await self.apply_chapters(chapters)
            self.notifier.notify(message("load-success"), tag="review-tool")
            return True
        finally:
            self.is_loading_annotations = False

    async def import_annotations(self, payload: Any) -> bool:
        """Replace the composition with an imported annotation document, all or nothing."""
        if not self.article_title:
            self.report_load_failure(message("import-no-page"))
            return False
        try:
            annotations = parse_import_payload(payload, user_name=self.user_name)
            composition = build_composition(annotations, message("annotation-fallback-chapter"), self.comparator)
        except (InvalidFormatError, EmptyImportError) as exc:
            logger.error("[ReviewTool] failed to import annotations: %s", exc.to_log_message())
            self.report_load_failure(message("import-invalid"))
            return False
        await self.apply_chapters(composition.chapters)
        self.notifier.notify(message("import-success"), tag="review-tool")
        return True

    async def import_annotations_file(self, path: Path) -> bool:
        if not self.article_title:
            self.report_load_failure(message("import-no-page"))
            return False
        try:
            annotations = load_import_file(path, user_name=self.user_name)
        except (InvalidFormatError, EmptyImportError) as exc:
            logger.error("[ReviewTool] failed to import %s: %s", path, exc.to_log_message())
            unreadable = isinstance(exc.__cause__, (OSError, UnicodeDecodeError))
            self.report_load_failure(message("import-error" if unreadable else "import-invalid"))
            return False
        return await self.import_annotations({"annotations": [a.model_dump(by_alias=True) for a in annotations]})

    async def apply_chapters(self, chapters: list[Chapter]) -> None:
        if not chapters:
            return
        self.composition = Composition(chapters=chapters)
        if self.current_step == PREVIEW_STEP:
            await self.prepare_preview()
        elif self.current_step == DIFF_STEP:
            await self.prepare_diff()

    def report_load_failure(self, text: str) -> None:
        self.notifier.notify(text, kind="warn", tag="review-tool")
        self.notifier.alert(text)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def save(self) -> EditResult:
        """
        Append the fragment to the target section.

        Raises `ValidationError` when the section cannot be resolved or there is
        nothing to save, and re-raises client errors after telling the user.
        The wizard stays open on every failure.
        """
        if not self.machine.is_last:
            raise ValidationError("commit is only available on the last step")
        self.is_saving = True
        try:
            target = self.get_target()
            if target.section_id is None:
                self._report_commit_failure(message("save-no-section"))
                raise ValidationError(message("save-no-section"), reported=True)

            bundle = self.build_preview_bundle()
            if bundle is None:
                self._report_commit_failure(message("save-empty"))
                raise ValidationError(message("save-empty"), reported=True)

            try:
                result = await self.sections.append_text_to_section(
                    target.page_title,
                    target.section_id,
                    bundle.append_suffix,
                    self.summary or get_settings().edit_summary or message("edit-summary"),
                )
            except ReviewToolError as exc:
                logger.error("[ReviewTool] append failed: %s", exc.to_log_message())
                if exc.reported:
                    self.notifier.alert(exc.message)
                else:
                    self._report_commit_failure(message("save-failed"))
                    exc.reported = True
                raise

            self.pending_heading = None
            self.close()
            return result
        finally:
            self.is_saving = False

    def _report_commit_failure(self, text: str) -> None:
        self.notifier.notify(text, kind="error", tag="review-tool")
        self.notifier.alert(text)
