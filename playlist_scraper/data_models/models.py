from __future__ import annotations

from typing import Any, Dict, List, Optional
from urllib.parse import parse_qs, urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator

from playlist_scraper.errors import InvalidInputError


class PlaylistLocator(BaseModel):
	"""Validated playlist URL plus the playlist id taken from its ``list`` parameter"""
	model_config = ConfigDict(frozen=True)

	url: str
	playlist_id: str = Field(min_length=1)

	@classmethod
	def parse(cls, url: Optional[str]) -> "PlaylistLocator":
		if not url or not isinstance(url, str) or not url.strip():
			raise InvalidInputError("Playlist URL is required")

		url = url.strip()
		parsed = urlparse(url)
		if parsed.scheme not in ("http", "https") or not parsed.netloc:
			raise InvalidInputError("Invalid playlist URL")

		playlist_ids = [value.strip() for value in parse_qs(parsed.query).get("list", []) if value.strip()]
		if not playlist_ids:
			raise InvalidInputError("Invalid playlist URL")

		return cls(url=url, playlist_id=playlist_ids[0])

	@property
	def target_url(self) -> str:
		return self.url


class RawVideoRecord(BaseModel):
	"""One playlist row as read from the DOM, before view parsing"""
	model_config = ConfigDict(frozen=True)

	title: str = ""
	raw_views_text: str = ""
	thumbnail_url: str = ""

	@field_validator("title", "raw_views_text", "thumbnail_url", mode="before")
	@classmethod
	def coerce_text(cls, v):
		if v is None:
			return ""
		return v.strip() if isinstance(v, str) else str(v).strip()

	@classmethod
	def from_row(cls, row: Any) -> "RawVideoRecord":
		"""Build a record from an in-page query row, tolerating missing fields"""
		if not isinstance(row, dict):
			return cls()
		return cls(
			title=row.get("title"),
			raw_views_text=row.get("viewsText"),
			thumbnail_url=row.get("thumbnail"),
		)

	def to_row(self) -> Dict[str, str]:
		return {"title": self.title, "viewsText": self.raw_views_text, "thumbnail": self.thumbnail_url}


class VideoRecord(BaseModel):
	title: str = ""
	views: int = Field(default=0, ge=0)
	thumbnail_url: str = Field(default="", serialization_alias="thumbnail")


class GraphPoint(BaseModel):
	label: str = Field(serialization_alias="name")
	views: int = Field(default=0, ge=0)


class PlaylistResult(BaseModel):
	video_list: List[VideoRecord] = Field(default_factory=list, serialization_alias="videoList")
	graph_data: List[GraphPoint] = Field(default_factory=list, serialization_alias="graphData")

	def to_response(self) -> Dict[str, Any]:
		return self.model_dump(by_alias=True)
