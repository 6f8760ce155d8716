"""Utilities for rendering, assembling, and writing pagesmith documentation pages."""

from .assembler import assemble
from .link_rewriter import BaseUrlExtension
from .models import (
    Heading,
    MenuEntry,
    MenuSection,
    PageBuildContext,
    PageLink,
    PageRecord,
    PaginationLink,
    RenderedPage,
)
from .page_context import build_page_record, check_unique_urls
from .renderer import MarkdownRenderer
from .site_builder import BuildResult, SiteBuilder
from .templates import TemplateRenderer
from .writer import OutputWriter, ensure_safe_output_dir

__all__ = [
    "BaseUrlExtension",
    "BuildResult",
    "Heading",
    "MarkdownRenderer",
    "MenuEntry",
    "MenuSection",
    "OutputWriter",
    "PageBuildContext",
    "PageLink",
    "PageRecord",
    "PaginationLink",
    "RenderedPage",
    "SiteBuilder",
    "TemplateRenderer",
    "assemble",
    "build_page_record",
    "check_unique_urls",
    "ensure_safe_output_dir",
]
