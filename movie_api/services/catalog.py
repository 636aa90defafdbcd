# movie_api/services/catalog.py
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional

from movie_api.core.errors import Conflict
from movie_api.db.crud.movies import MovieRepository
from movie_api.db.models import Movie

log = logging.getLogger(__name__)

_TRAILING_ID = re.compile(r"\d+/?$")


def title_from_url(url: Optional[str]) -> str:
    """
    Pexels page URLs look like https://www.pexels.com/video/a-man-surfing-856789/
    -> "a man surfing"
    """
    if not url or "/video/" not in url:
        return "Untitled"
    slug = url.split("/video/", 1)[1].replace("-", " ")
    title = _TRAILING_ID.sub("", slug).strip()
    return title or "Untitled"


def movie_fields(video: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Map one Pexels video onto Movie columns; None if it has no playable file."""
    files = video.get("video_files") or []
    video_url = files[0].get("link") if files else None
    if not video.get("id") or not video_url:
        return None

    author = (video.get("user") or {}).get("name") or "Unknown"
    return {
        "pexels_id": int(video["id"]),
        "title": title_from_url(video.get("url")),
        "image_url": video.get("image") or "",
        "video_url": video_url,
        "duration": int(video.get("duration") or 0),
        "author": author,
        "description": f"Video by {author} from Pexels",
    }


async def ingest_videos(movies: MovieRepository, videos: List[Dict[str, Any]]) -> List[Movie]:
    """Store provider videos as movies, reusing rows already ingested under the same pexels id."""
    out: List[Movie] = []
    seen: set[int] = set()
    for video in videos:
        fields = movie_fields(video)
        if fields is None:
            log.warning("Skipping Pexels video %s: no video file", video.get("id"))
            continue
        if fields["pexels_id"] in seen:
            continue
        seen.add(fields["pexels_id"])

        existing = await movies.find_by_pexels_id(fields["pexels_id"])
        if existing is not None:
            out.append(existing)
            continue
        try:
            out.append(await movies.crud.create(fields))
        except Conflict:
            # Another request ingested it in between. The rollback expired
            # everything loaded so far, so reload before handing rows back.
            existing = await movies.find_by_pexels_id(fields["pexels_id"])
            if existing is None:
                raise
            for movie in out:
                await movies.session.refresh(movie)
            out.append(existing)
    return out
