"""
Report Card Renderer

Renders one HTML card per report record using Jinja2 templates and records,
for each render pass, which DOM region belongs to which record.
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional, Sequence, Tuple, Mapping
from datetime import datetime
from types import MappingProxyType
from urllib.parse import quote
import os
import jinja2

from reportcards.core.recommendations import RecommendationResolver, Resolution
from reportcards.models import ReportRecord
from reportcards.utils import get_logger

logger = get_logger(__name__)

HOSPITAL_NAME = "Evergreen Wellness Hospital"
FOOTER_CONTACT = (
    "For inquiries and appointments, contact please visit our hospital "
    "or contact us at (123) 456-7890."
)
EMPTY_MESSAGE = "No reports available."

# (record attribute, alt text) in display order
CARD_IMAGES: Tuple[Tuple[str, str], ...] = (
    ("image_url", "Medical Scan"),
    ("gradcam_url", "Grad-CAM Heatmap"),
    ("yolo_url", "YOLO Detection"),
)

DEFAULT_EXPORT_URL = "/api/v1/reports/{id}/export"


@dataclass(frozen=True)
class CardImage:
    """An embedded image shown on a card."""
    alt: str
    src: str


@dataclass(frozen=True)
class CardView:
    """Everything a single card template needs."""
    record: ReportRecord
    resolution: Resolution
    region_id: str
    images: Tuple[CardImage, ...] = ()
    export_url: str = ""

    @property
    def selector(self) -> str:
        return f"#{self.region_id}"


@dataclass(frozen=True)
class RenderPass:
    """
    Output of one render of the report list.

    ``regions`` maps ``str(record.id)`` to the CSS selector of that record's
    card region. It is only meaningful together with ``html`` from the same
    pass and is replaced wholesale by the next one.
    """
    html: str
    cards: Tuple[CardView, ...]
    regions: Mapping[str, str]
    rendered_at: datetime = field(default_factory=datetime.now)

    @property
    def is_empty(self) -> bool:
        return not self.cards

    def region_for(self, record_id: Any) -> Optional[str]:
        """Capture handle for a record id, or None when its card is not mounted."""
        return self.regions.get(str(record_id))


def embed_image(payload: Optional[str]) -> Optional[str]:
    """Turn a base64 PNG payload into a data URI; absent payloads stay absent."""
    if not payload:
        return None
    return f"data:image/png;base64,{payload}"


class ReportCardRenderer:
    """
    Renders report records into a single HTML page of cards.
    """

    def __init__(
        self,
        resolver: RecommendationResolver,
        templates_dir: Optional[str] = None,
        hospital_name: str = HOSPITAL_NAME,
        footer_contact: str = FOOTER_CONTACT,
        export_url: str = DEFAULT_EXPORT_URL,
    ):
        self.resolver = resolver
        self.hospital_name = hospital_name
        self.footer_contact = footer_contact
        self.export_url = export_url

        template_dir = templates_dir or os.path.join(os.path.dirname(__file__), "templates")
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(template_dir),
            autoescape=jinja2.select_autoescape(['html', 'xml'])
        )

        logger.info(f"ReportCardRenderer initialized, templates: {template_dir}")

    @classmethod
    def from_settings(cls, resolver: RecommendationResolver, settings) -> "ReportCardRenderer":
        return cls(
            resolver=resolver,
            templates_dir=settings.templates_dir,
            hospital_name=settings.hospital_name,
            footer_contact=settings.footer_contact,
            export_url=settings.api_prefix + "/reports/{id}/export",
        )

    def build_card(self, record: ReportRecord, index: int) -> CardView:
        """Resolve findings and collect images for one record."""
        images = []
        for attribute, alt in CARD_IMAGES:
            src = embed_image(getattr(record, attribute))
            if src:
                images.append(CardImage(alt=alt, src=src))

        return CardView(
            record=record,
            resolution=self.resolver.resolve(record.diagnosis, record.confidence),
            region_id=f"report-region-{index}",
            images=tuple(images),
            export_url=self.export_url.format(id=quote(record.key, safe="")),
        )

    def render_list(self, records: Sequence[ReportRecord]) -> RenderPass:
        """
        Render every record as a card, preserving input order.

        An empty sequence renders the placeholder message and no cards.
        """
        cards: List[CardView] = []
        regions: Dict[str, str] = {}

        for index, record in enumerate(records):
            card = self.build_card(record, index)
            if record.key in regions:
                logger.warning(
                    f"Duplicate report id {record.key!r}; export will capture the last card rendered with it"
                )
            regions[record.key] = card.selector
            cards.append(card)

        template = self.jinja_env.get_template("report_list.html")
        html = template.render(
            cards=cards,
            hospital_name=self.hospital_name,
            footer_contact=self.footer_contact,
            empty_message=EMPTY_MESSAGE,
        )

        logger.debug(f"Rendered {len(cards)} report card(s)")
        return RenderPass(
            html=html,
            cards=tuple(cards),
            regions=MappingProxyType(regions),
        )
