"""
Data models for the analysis stage
"""

from dataclasses import asdict, dataclass, field

from auditor.extractor.models import CrawlSnapshot

CATEGORY_WEIGHTS = {
    "technical": 0.25,
    "content": 0.25,
    "performance": 0.20,
    "user_experience": 0.20,
    "accessibility": 0.10,
}

PRIORITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


@dataclass(frozen=True)
class PromptSpec:
    """A catalog prompt; plain data, dispatched uniformly"""

    id: str
    name: str
    category: str
    content: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class PromptOutcome:
    """Result or failure of one prompt"""

    prompt_id: str
    name: str
    category: str
    succeeded: bool
    executed_at: str
    result_text: str | None = None
    error_message: str | None = None
    usage: dict | None = None

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "PromptOutcome":
        return cls(**data)


@dataclass
class CategoryScores:
    """Category scores 0-100 plus the weighted overall"""

    technical: int = 0
    content: int = 0
    performance: int = 0
    user_experience: int = 0
    accessibility: int = 0
    overall: int = 0
    measured: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "CategoryScores":
        return cls(**data)


@dataclass
class Recommendation:
    title: str
    priority: str = "medium"
    category: str = "general"
    impact: str = "medium"
    effort: str = "medium"
    difficulty: str = "intermediate"
    why_it_matters: str = ""
    expected_outcome: str = ""
    details: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "Recommendation":
        return cls(**data)


@dataclass
class LanguageInfo:
    code: str = "en"
    name: str = "English"
    confidence: float = 0.3
    sources: list[str] = field(default_factory=lambda: ["default"])

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class AnalysisResult:
    """Everything a completed job carries"""

    snapshot: CrawlSnapshot
    outcomes: list[PromptOutcome]
    scores: CategoryScores
    summary: str
    recommendations: list[Recommendation]
    language: LanguageInfo
    seo_validation: dict
    priority_matrix: list[dict]
    analyzed_at: str
    analysis_time_ms: int = 0

    @property
    def failed_prompts(self) -> list[PromptOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization"""
        return {
            "snapshot": self.snapshot.to_dict(),
            "outcomes": [o.to_dict() for o in self.outcomes],
            "scores": self.scores.to_dict(),
            "summary": self.summary,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "language": self.language.to_dict(),
            "seo_validation": self.seo_validation,
            "priority_matrix": self.priority_matrix,
            "analyzed_at": self.analyzed_at,
            "analysis_time_ms": self.analysis_time_ms,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AnalysisResult":
        return cls(
            snapshot=CrawlSnapshot.from_dict(data["snapshot"]),
            outcomes=[PromptOutcome.from_dict(o) for o in data.get("outcomes", [])],
            scores=CategoryScores.from_dict(data.get("scores") or {}),
            summary=data.get("summary", ""),
            recommendations=[
                Recommendation.from_dict(r) for r in data.get("recommendations", [])
            ],
            language=LanguageInfo(**(data.get("language") or {})),
            seo_validation=data.get("seo_validation") or {},
            priority_matrix=data.get("priority_matrix") or [],
            analyzed_at=data.get("analyzed_at", ""),
            analysis_time_ms=data.get("analysis_time_ms", 0),
        )
