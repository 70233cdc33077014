from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

Tier = Literal["page", "live"]


class ReviewInfo(BaseModel):
    """Review quadruple decoded from ``{reviewId}--{ref}--{repo}--{owner}``.

    Missing tokens stay ``None``; they are not validated.
    """

    model_config = ConfigDict(frozen=True)

    review_id: str | None = None
    ref: str | None = None
    repo: str | None = None
    owner: str | None = None

    @classmethod
    def from_hostname(cls, hostname: str) -> "ReviewInfo":
        label = hostname.split(".")[0]
        tokens = label.split("--")[:4]
        tokens += [None] * (4 - len(tokens))
        review_id, ref, repo, owner = tokens
        return cls(review_id=review_id, ref=ref, repo=repo, owner=owner)

    def base_hostname(self, aem_domain: str = "aem") -> str:
        return f"{self.ref or ''}--{self.repo or ''}--{self.owner or ''}.{aem_domain}"

    def origin(self, tier: Tier, aem_domain: str = "aem") -> str:
        return f"https://{self.base_hostname(aem_domain)}.{tier}"

    @property
    def snapshot_prefix(self) -> str:
        return f"/.snapshots/{self.review_id or ''}"

    def manifest_url(self, aem_domain: str = "aem") -> str:
        return f"{self.origin('page', aem_domain)}{self.snapshot_prefix}/.manifest.json"

    def metadata_url(self, aem_domain: str = "aem") -> str:
        return f"{self.origin('page', aem_domain)}{self.snapshot_prefix}/metadata.json"


class Resource(BaseModel):
    model_config = ConfigDict(extra="ignore")

    path: str


class ManifestMetadata(BaseModel):
    model_config = ConfigDict(extra="allow")

    reviewPassword: str | None = None


class Manifest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    resources: list[Resource]
    metadata: ManifestMetadata | None = None

    @property
    def page_paths(self) -> list[str]:
        return [r.path for r in self.resources]

    @property
    def page_set(self) -> frozenset[str]:
        return frozenset(self.page_paths)

    @property
    def review_password(self) -> str | None:
        return self.metadata.reviewPassword if self.metadata else None


def meta_value(value: Any) -> str:
    """Render a metadata.json cell as JavaScript would (`true`, `1`, not `True`, `1.0`)."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class MetaRule(BaseModel):
    """One row of ``metadata.json``: a ``URL`` glob plus meta fields to inject."""

    model_config = ConfigDict(frozen=True)

    pattern: str
    fields: list[tuple[str, str]] = Field(default_factory=list)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MetaRule | None":
        pattern = row.get("URL")
        if not isinstance(pattern, str):
            return None
        fields: list[tuple[str, str]] = []
        for key, value in row.items():
            name = key.lower()
            if name == "url" or not value:
                continue
            fields.append((name, meta_value(value)))
        return cls(pattern=pattern, fields=fields)


class MetadataSheet(BaseModel):
    model_config = ConfigDict(extra="ignore")

    data: list[dict[str, Any]] = Field(default_factory=list)

    def rules(self) -> list[MetaRule]:
        out: list[MetaRule] = []
        for row in self.data:
            rule = MetaRule.from_row(row)
            if rule is not None:
                out.append(rule)
        return out
