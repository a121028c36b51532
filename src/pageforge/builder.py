# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""PageStructureBuilder — page descriptor → semantic Document + findings.

Pipeline stages (findings are concatenated in this order):

  1. navigation  — dead nav targets (empty, "#", javascript:, unknown #id)
  2. structure   — one header / main / footer landmark, else StructuralConflict
  3. headings    — visually-hidden heading for unheaded sections with content
  4. controls    — accessible labels for buttons and new-tab links
  5. images      — loading directives via image_directive
  6. styles      — var(--token) resolution, unknown CSS properties
  7. resources   — preconnect / deferred / blocking plan
  8. contacts    — canonical contact directives
  9. seo         — meta description, primary heading

Only StructuralConflict, AmbiguousControl and UnknownToken abort a page;
every other rule is reported and the build continues.  Findings never
reorder sections.
"""

from __future__ import annotations

import logging

from . import BuildResult, Document, HeadDirectives, Node
from .contact import RENDER_DEFERRED, ContactResolution, resolve_contacts
from .descriptor import (
    ButtonBlock,
    ImageBlock,
    Landmark,
    LinkBlock,
    NavLink,
    PageDescriptor,
    Section,
    SectionKind,
    TextBlock,
)
from .errors import AmbiguousControlError, FatalBuildError, StructuralConflictError
from .findings import Finding, RuleId, make_finding
from .image_directive import resolve_image
from .pipeline_timer import PipelineTimer
from .resource_hints import plan_resources
from .theme import ThemeTokenRegistry

logger = logging.getLogger(__name__)

STAGES = ("navigation", "structure", "headings", "controls", "images", "styles", "resources", "contacts", "seo")

_DEFAULT_LANDMARK: dict[SectionKind, Landmark] = {
    SectionKind.HERO: Landmark.HEADER,
    SectionKind.FOOTER: Landmark.FOOTER,
    SectionKind.SERVICES: Landmark.MAIN,
    SectionKind.FEATURES: Landmark.MAIN,
    SectionKind.GENERIC: Landmark.MAIN,
}

_AUTO_HEADINGS: dict[SectionKind, str] = {
    SectionKind.SERVICES: "Services",
    SectionKind.FEATURES: "Features",
    SectionKind.FOOTER: "Footer",
    SectionKind.GENERIC: "Section",
}

VISUALLY_HIDDEN = "visually-hidden"
MAIN_CONTENT_ID = "main-content"
NEW_CONTEXT_SUFFIX = "(opens in a new tab)"

# Properties accepted in section style declarations.  Custom properties
# (--name) are always accepted.
KNOWN_CSS_PROPERTIES = frozenset(
    {
        "align-items",
        "background",
        "background-color",
        "background-image",
        "background-position",
        "background-size",
        "border",
        "border-color",
        "border-radius",
        "box-shadow",
        "color",
        "column-gap",
        "display",
        "flex",
        "flex-direction",
        "flex-wrap",
        "font-family",
        "font-size",
        "font-weight",
        "gap",
        "grid-template-columns",
        "height",
        "justify-content",
        "letter-spacing",
        "line-height",
        "margin",
        "margin-block",
        "margin-bottom",
        "margin-inline",
        "margin-left",
        "margin-right",
        "margin-top",
        "max-width",
        "min-height",
        "min-width",
        "opacity",
        "overflow",
        "padding",
        "padding-block",
        "padding-bottom",
        "padding-inline",
        "padding-left",
        "padding-right",
        "padding-top",
        "position",
        "row-gap",
        "text-align",
        "text-decoration",
        "text-transform",
        "transition",
        "width",
        "z-index",
    }
)


def is_dead_target(href: str, anchor_ids: set[str]) -> bool:
    """True when *href* cannot navigate anywhere on this page or beyond."""
    target = href.strip()
    if not target or target == "#":
        return True
    if target.lower().startswith("javascript:"):
        return True
    if target.startswith("#"):
        return target[1:] not in anchor_ids
    return False


def section_anchor_id(page_id: str, idx: int, section: Section) -> str:
    return section.id or f"{page_id}-section-{idx + 1}"


def page_anchor_ids(descriptor: PageDescriptor) -> set[str]:
    """Every element id the built document carries: sections, their headings, main."""
    ids = {MAIN_CONTENT_ID}
    for idx, section in enumerate(descriptor.sections):
        section_id = section_anchor_id(descriptor.id, idx, section)
        ids.add(section_id)
        ids.add(f"{section_id}-heading")
    return ids


def assign_landmarks(sections: tuple[Section, ...] | list[Section]) -> dict[Landmark, list[int]]:
    """Map each landmark to the indices of the sections it wraps.

    Raises:
        StructuralConflictError: duplicate header/footer, competing main
            sections, or no main content at all.
    """
    buckets: dict[Landmark, list[int]] = {lm: [] for lm in Landmark}
    explicit_main: list[int] = []
    for idx, section in enumerate(sections):
        landmark = section.landmark or _DEFAULT_LANDMARK[section.kind]
        if section.landmark is Landmark.MAIN:
            explicit_main.append(idx)
        buckets[landmark].append(idx)

    for landmark in (Landmark.HEADER, Landmark.FOOTER):
        if len(buckets[landmark]) > 1:
            raise StructuralConflictError(
                f"{len(buckets[landmark])} sections map to the {landmark} landmark "
                f"(sections {buckets[landmark]}); only one is allowed",
                subject=str(landmark),
            )
    if not buckets[Landmark.MAIN]:
        raise StructuralConflictError("Page has no main content section", subject=str(Landmark.MAIN))
    if explicit_main and len(buckets[Landmark.MAIN]) > 1:
        raise StructuralConflictError(
            f"Section {explicit_main[0]} declares itself the main landmark but "
            f"{len(buckets[Landmark.MAIN]) - 1} other section(s) also belong in main",
            subject=str(Landmark.MAIN),
        )
    return buckets


class PageStructureBuilder:
    """Assemble one page.  Holds only read-only collaborators, safe to share across threads."""

    def __init__(self, theme: ThemeTokenRegistry, *, contacts: ContactResolution | None = None) -> None:
        self.theme = theme
        self.contacts = contacts

    def build(self, descriptor: PageDescriptor) -> BuildResult:
        """Build *descriptor* into a Document.

        Raises:
            StructuralConflictError, AmbiguousControlError, UnknownTokenError
        """
        timer = PipelineTimer()
        try:
            result = self._build(descriptor, timer)
        except FatalBuildError as e:
            timer.finalize()
            e.stage = timer.last_stage or ""
            logger.warning("Page %s aborted: %s (%s)", descriptor.id, e, timer.abort_report())
            raise
        timer.finalize()
        result.timings = timer.elapsed_per_stage()
        logger.debug("Page %s stage timings: %s", descriptor.id, result.timings)
        logger.info(
            "Built page %s: %d sections, %d findings",
            descriptor.id,
            len(descriptor.sections),
            len(result.findings),
        )
        return result

    # -- stages --

    def _build(self, descriptor: PageDescriptor, timer: PipelineTimer) -> BuildResult:
        findings: dict[str, list[Finding]] = {stage: [] for stage in STAGES}
        sections = descriptor.sections

        timer.stage("navigation")
        nav = self._navigation(descriptor.nav, page_anchor_ids(descriptor), findings["navigation"])

        timer.stage("structure")
        buckets = assign_landmarks(sections)

        timer.stage("headings")
        section_nodes = [
            self._section_shell(descriptor.id, idx, section, findings["headings"])
            for idx, section in enumerate(sections)
        ]

        timer.stage("controls")
        block_nodes: dict[tuple[int, int], Node] = {}
        for si, section in enumerate(sections):
            for bi, block in enumerate(section.blocks):
                if isinstance(block, ButtonBlock):
                    block_nodes[si, bi] = self._button(block, findings["controls"])
                elif isinstance(block, LinkBlock):
                    block_nodes[si, bi] = self._link(block, findings["controls"])

        timer.stage("images")
        for si, section in enumerate(sections):
            for bi, block in enumerate(section.blocks):
                if isinstance(block, ImageBlock):
                    block_nodes[si, bi] = self._image(block, findings["images"])

        timer.stage("styles")
        for section, node in zip(sections, section_nodes):
            node.style = self._resolve_style(section, findings["styles"])

        for si, section in enumerate(sections):
            for bi, block in enumerate(section.blocks):
                if isinstance(block, TextBlock):
                    block_nodes[si, bi] = Node(kind="text", text=block.text)
                section_nodes[si].children.append(block_nodes[si, bi])

        timer.stage("resources")
        plan = plan_resources(descriptor.resources)
        findings["resources"].extend(plan.findings)
        head = HeadDirectives(
            preconnect=list(plan.preconnect),
            blocking=[r.url for r in plan.blocking],
            deferred=[r.url for r in plan.deferred],
            description=descriptor.description,
            custom_properties=self.theme.custom_properties(),
        )

        timer.stage("contacts")
        contact_nodes = self._contacts(descriptor, findings["contacts"])

        header = Node(kind="header", attrs={"role": "banner"})
        if nav.children:
            header.children.append(nav)
        main = Node(kind="main", attrs={"role": "main", "id": MAIN_CONTENT_ID})
        footer = Node(kind="footer", attrs={"role": "contentinfo"})
        for landmark, node in ((Landmark.HEADER, header), (Landmark.MAIN, main), (Landmark.FOOTER, footer)):
            node.children.extend(section_nodes[i] for i in buckets[landmark])
        footer.children.extend(contact_nodes)

        timer.stage("seo")
        if not descriptor.description.strip():
            findings["seo"].append(
                make_finding(RuleId.MISSING_META_DESCRIPTION, f"Page '{descriptor.title}' has no meta description.")
            )
        if not any(n.attrs.get("aria-level") == "1" for lm in (header, main, footer) for n in lm.iter()):
            findings["seo"].append(
                make_finding(RuleId.MISSING_PRIMARY_HEADING, "Page has no level-1 heading; give the hero a heading.")
            )

        document = Document(
            page_id=descriptor.id,
            title=descriptor.title,
            lang=descriptor.lang,
            head=head,
            header=header,
            main=main,
            footer=footer,
        )
        ordered = [f.with_page(descriptor.id) for stage in STAGES for f in findings[stage]]
        return BuildResult(document=document, findings=ordered)

    def _navigation(self, links: tuple[NavLink, ...], anchor_ids: set[str], out: list[Finding]) -> Node:
        nav = Node(kind="nav", attrs={"role": "navigation", "aria-label": "Primary"})
        for link in links:
            node = Node(kind="link", attrs={"href": link.href}, text=link.label)
            if is_dead_target(link.href, anchor_ids):
                node.data["dead"] = True
                out.append(
                    make_finding(
                        RuleId.DEAD_NAVIGATION_LINK,
                        f"Navigation link '{link.label}' points to '{link.href}', which goes nowhere.",
                        subject=link.href,
                    )
                )
            nav.children.append(node)
        return nav

    def _section_shell(self, page_id: str, idx: int, section: Section, out: list[Finding]) -> Node:
        section_id = section_anchor_id(page_id, idx, section)
        node = Node(kind="section", attrs={"id": section_id}, data={"kind": str(section.kind)})
        level = "1" if section.kind is SectionKind.HERO else "2"
        heading_id = f"{section_id}-heading"

        if section.heading and section.heading.strip():
            node.children.append(
                Node(kind="heading", attrs={"id": heading_id, "aria-level": level}, text=section.heading.strip())
            )
            node.attrs["aria-labelledby"] = heading_id
        elif section.kind is not SectionKind.HERO and section.has_body:
            text = _AUTO_HEADINGS[section.kind]
            node.children.append(
                Node(
                    kind="heading",
                    attrs={"id": heading_id, "aria-level": level, "class": VISUALLY_HIDDEN},
                    text=text,
                )
            )
            node.attrs["aria-labelledby"] = heading_id
            out.append(
                make_finding(
                    RuleId.AUTO_HEADING_INSERTED,
                    f"Section {idx + 1} ({section.kind}) had no heading; inserted hidden heading '{text}'.",
                    subject=section_id,
                )
            )
        return node

    def _button(self, block: ButtonBlock, out: list[Finding]) -> Node:
        label = self._label(block.label, block.text, kind="button", out=out)
        if block.href is not None:
            node = Node(kind="button", attrs={"href": block.href, "aria-label": label}, text=block.text.strip())
        else:
            node = Node(kind="button", attrs={"type": "button", "aria-label": label}, text=block.text.strip())
        if block.icon:
            node.children.append(Node(kind="icon", attrs={"class": block.icon, "aria-hidden": "true"}))
        return node

    def _link(self, block: LinkBlock, out: list[Finding]) -> Node:
        attrs = {"href": block.href}
        if block.new_context:
            label = self._label(block.label, block.text, kind="link", out=out, suffix=NEW_CONTEXT_SUFFIX)
            attrs.update({"target": "_blank", "rel": "noopener noreferrer", "aria-label": label})
        elif block.label and block.label.strip():
            attrs["aria-label"] = block.label.strip()
        return Node(kind="link", attrs=attrs, text=block.text.strip())

    @staticmethod
    def _label(label: str | None, text: str, *, kind: str, out: list[Finding], suffix: str = "") -> str:
        if label and label.strip():
            return label.strip()
        visible = text.strip()
        if not visible:
            raise AmbiguousControlError(f"A {kind} has neither visible text nor an accessible label", subject=kind)
        synthesized = f"{visible} {suffix}" if suffix else visible
        out.append(
            make_finding(
                RuleId.MISSING_ACCESSIBLE_LABEL,
                f"{kind.capitalize()} '{visible}' has no accessible label; using '{synthesized}'.",
                subject=visible,
            )
        )
        return synthesized

    @staticmethod
    def _image(block: ImageBlock, out: list[Finding]) -> Node:
        directive, image_findings = resolve_image(block, above_fold=not block.below_fold)
        out.extend(image_findings)
        attrs = directive.to_attrs()
        attrs["alt"] = (block.alt or "").strip()
        return Node(kind="image", attrs=attrs, data={"directive": directive})

    def _resolve_style(self, section: Section, out: list[Finding]) -> dict[str, str]:
        resolved: dict[str, str] = {}
        for prop, value in section.style.items():
            name = prop.strip().lower()
            if not name.startswith("--") and name not in KNOWN_CSS_PROPERTIES:
                out.append(
                    make_finding(
                        RuleId.INVALID_STYLE_PROPERTY,
                        f"'{prop}' is not a CSS property; declaration dropped.",
                        subject=prop,
                    )
                )
                continue
            resolved[name] = self.theme.resolve_value(value)
        return resolved

    def _contacts(self, descriptor: PageDescriptor, out: list[Finding]) -> list[Node]:
        resolution = self.contacts
        if resolution is None:
            resolution = resolve_contacts((descriptor.id, c) for c in descriptor.contacts)
        out.extend(resolution.findings_for(descriptor.id))

        nodes: list[Node] = []
        seen = set()
        for channel in descriptor.contacts:
            if channel.type in seen:
                continue
            seen.add(channel.type)
            directive = resolution.directives.get(channel.type)
            if directive is None:
                directive = resolve_contacts([(descriptor.id, channel)]).directives[channel.type]
            text = "" if directive.render == RENDER_DEFERRED else directive.value
            nodes.append(
                Node(
                    kind="contact",
                    attrs=directive.to_attrs(),
                    text=text,
                    data={"channel": str(channel.type), "directive": directive},
                )
            )
        return nodes
