"""
Data models for page extraction
"""

from dataclasses import asdict, dataclass, field

HEADING_LEVELS = ("h1", "h2", "h3", "h4", "h5", "h6")


@dataclass(frozen=True)
class Heading:
    text: str
    position: int


@dataclass(frozen=True)
class ImageInfo:
    src: str
    alt: str
    has_alt: bool
    position: int
    title: str = ""
    width: int | None = None
    height: int | None = None
    loading: str = ""


@dataclass(frozen=True)
class LinkInfo:
    href: str
    text: str
    is_internal: bool
    position: int
    title: str = ""
    rel: str = ""
    target: str = ""

    @property
    def is_external(self) -> bool:
        return not self.is_internal


@dataclass(frozen=True)
class SchemaBlock:
    """One parsed application/ld+json block"""

    position: int
    data: dict | list


@dataclass(frozen=True)
class MetaData:
    """Meta tag map plus the fields derived from it"""

    description: str = ""
    keywords: str = ""
    robots: str = ""
    canonical: str = ""
    lang: str = ""
    charset: str = "UTF-8"
    tags: dict[str, str] = field(default_factory=dict)
    open_graph: dict[str, str] = field(default_factory=dict)
    twitter_card: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ContentStats:
    text_content: str = ""
    word_count: int = 0
    paragraph_count: int = 0
    has_special_chars: bool = False


@dataclass(frozen=True)
class TechnicalFlags:
    """Flags computed once from the raw extraction"""

    has_h1: bool = False
    h1_count: int = 0
    has_meta_description: bool = False
    has_meta_keywords: bool = False
    has_canonical: bool = False
    has_robots: bool = False
    has_viewport: bool = False
    has_ssl: bool = False
    has_favicon: bool = False
    has_lang: bool = False


@dataclass(frozen=True)
class ResourceStats:
    """Network counters collected while the page loaded"""

    requests: int = 0
    responses: int = 0
    failures: int = 0
    total_bytes: int = 0


@dataclass(frozen=True)
class WebVitals:
    lcp: float | None = None
    fid: float | None = None
    cls: float | None = None
    fcp: float | None = None
    ttfb: float | None = None


@dataclass(frozen=True)
class PerformanceData:
    load_time_ms: int = 0
    resources: ResourceStats = field(default_factory=ResourceStats)
    web_vitals: WebVitals = field(default_factory=WebVitals)
    scores: dict[str, int | None] = field(default_factory=dict)


@dataclass(frozen=True)
class CrawlSnapshot:
    """Everything extracted from one page load; plain values only"""

    url: str
    status_code: int
    crawled_at: str
    title: str
    meta: MetaData
    headings: dict[str, list[Heading]]
    images: list[ImageInfo]
    links: list[LinkInfo]
    schema_markup: list[SchemaBlock]
    content: ContentStats
    technical: TechnicalFlags
    performance: PerformanceData
    requested_url: str = ""

    @property
    def load_time_ms(self) -> int:
        return self.performance.load_time_ms

    @property
    def internal_links(self) -> list[LinkInfo]:
        return [link for link in self.links if link.is_internal]

    @property
    def external_links(self) -> list[LinkInfo]:
        return [link for link in self.links if not link.is_internal]

    @property
    def images_without_alt(self) -> list[ImageInfo]:
        return [image for image in self.images if not image.has_alt]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CrawlSnapshot":
        performance = data.get("performance") or {}
        return cls(
            url=data["url"],
            requested_url=data.get("requested_url", ""),
            status_code=data.get("status_code", 0),
            crawled_at=data.get("crawled_at", ""),
            title=data.get("title", ""),
            meta=MetaData(**(data.get("meta") or {})),
            headings={
                level: [Heading(**h) for h in (data.get("headings") or {}).get(level, [])]
                for level in HEADING_LEVELS
            },
            images=[ImageInfo(**img) for img in data.get("images", [])],
            links=[LinkInfo(**link) for link in data.get("links", [])],
            schema_markup=[SchemaBlock(**block) for block in data.get("schema_markup", [])],
            content=ContentStats(**(data.get("content") or {})),
            technical=TechnicalFlags(**(data.get("technical") or {})),
            performance=PerformanceData(
                load_time_ms=performance.get("load_time_ms", 0),
                resources=ResourceStats(**(performance.get("resources") or {})),
                web_vitals=WebVitals(**(performance.get("web_vitals") or {})),
                scores=performance.get("scores") or {},
            ),
        )
