"""
Markdown post loading.

Every post is one <slug>.md file in the posts directory: a YAML front-matter
block between '---' lines followed by the markdown body.

    ---
    title: Getting Started with FastAPI
    image: getting-started.png
    excerpt: A framework for building APIs.
    date: 2022-02-10
    isFeatured: true
    ---

    # Body in markdown...

PostRepository reads the directory on every call. RevalidatingPosts keeps a
snapshot of the listing and rebuilds it once it is older than the
revalidation interval.
"""
import re
import threading
import time
from pathlib import Path
from typing import Callable, Dict, List, Optional, Union

import yaml
from pydantic import ValidationError

from logging_config import LoggingConfig
from schemas import Post

logger = LoggingConfig.get_logger(__name__)

POST_SUFFIX = ".md"
FRONT_MATTER = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


class PostError(Exception):
    pass


class PostNotFound(PostError):
    def __init__(self, slug: str):
        super().__init__(f"No post with slug {slug!r}")
        self.slug = slug


class InvalidPost(PostError):
    def __init__(self, slug: str, reason: str):
        super().__init__(f"Post {slug!r} is invalid: {reason}")
        self.slug = slug
        self.reason = reason


def split_front_matter(text: str):
    """Return (front-matter mapping, body). Text without a block gives ({}, text)."""
    match = FRONT_MATTER.match(text)
    if not match:
        return {}, text
    data = yaml.safe_load(match.group(1)) or {}
    return data, text[match.end():]


def parse_post(slug: str, text: str) -> Post:
    try:
        data, body = split_front_matter(text)
    except yaml.YAMLError as e:
        raise InvalidPost(slug, f"bad front-matter: {e}") from e
    if not isinstance(data, dict):
        raise InvalidPost(slug, "front-matter is not a mapping")

    # slug always comes from the filename, never from front-matter
    fields = {k: v for k, v in data.items() if k != "slug"}
    try:
        return Post(**fields, slug=slug, content=body.lstrip("\r\n"))
    except ValidationError as e:
        raise InvalidPost(slug, str(e)) from e


class PostRepository:
    """Posts stored as <slug>.md files in one directory"""

    def __init__(self, posts_dir: Union[str, Path]):
        self.posts_dir = Path(posts_dir)

    def post_files(self) -> List[str]:
        if not self.posts_dir.is_dir():
            logger.warning("Posts directory %s does not exist", self.posts_dir)
            return []
        return sorted(
            p.name for p in self.posts_dir.iterdir()
            if p.is_file() and p.suffix == POST_SUFFIX
        )

    def slugs(self) -> List[str]:
        return [Path(name).stem for name in self.post_files()]

    def get_post(self, slug_or_filename: str) -> Post:
        """Load one post. Accepts 'my-post' or 'my-post.md'."""
        slug = slug_or_filename
        if slug.endswith(POST_SUFFIX):
            slug = slug[:-len(POST_SUFFIX)]

        # the slug set is closed: only names listed in the directory resolve
        if slug not in self.slugs():
            logger.warning("Post %r not found in %s", slug, self.posts_dir)
            raise PostNotFound(slug)

        post = self._load(slug)
        if post is None:
            raise PostNotFound(slug)
        return post

    def _load(self, slug: str) -> Optional[Post]:
        """Read and parse <slug>.md; None if the file is gone"""
        path = self.posts_dir / f"{slug}{POST_SUFFIX}"
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return parse_post(slug, text)

    def get_all_posts(self) -> List[Post]:
        posts = []
        for slug in self.slugs():
            post = self._load(slug)
            if post is None:
                logger.warning("Post %r was removed while listing", slug)
                continue
            posts.append(post)
        return sort_posts(posts)

    def get_featured_posts(self) -> List[Post]:
        return featured(self.get_all_posts())


def sort_posts(posts: List[Post]) -> List[Post]:
    """Newest first"""
    return sorted(posts, key=lambda post: post.date, reverse=True)


def featured(posts: List[Post]) -> List[Post]:
    return [post for post in posts if post.is_featured]


class _Snapshot:
    def __init__(self, posts: List[Post], built_at: float):
        self.posts = posts
        self.by_slug: Dict[str, Post] = {post.slug: post for post in posts}
        self.built_at = built_at


class RevalidatingPosts:
    """Post listing regenerated from disk at most once per interval.

    Readers always see a complete snapshot; a rebuild replaces it in one
    assignment. If a rebuild fails the error propagates and the previous
    snapshot stays in place.
    """

    def __init__(self, repository: PostRepository, revalidate_seconds: float = 1800,
                 clock: Callable[[], float] = time.monotonic):
        self.repository = repository
        self.revalidate_seconds = revalidate_seconds
        self._clock = clock
        self._snapshot: Optional[_Snapshot] = None
        self._lock = threading.Lock()

    def _current(self) -> _Snapshot:
        snapshot = self._snapshot
        if snapshot is not None and not self._is_stale(snapshot):
            return snapshot
        with self._lock:
            snapshot = self._snapshot
            if snapshot is None or self._is_stale(snapshot):
                posts = self.repository.get_all_posts()
                snapshot = _Snapshot(posts, self._clock())
                self._snapshot = snapshot
                logger.info("Regenerated post listing: %d posts", len(posts))
            return snapshot

    def _is_stale(self, snapshot: _Snapshot) -> bool:
        return self._clock() - snapshot.built_at >= self.revalidate_seconds

    def invalidate(self):
        with self._lock:
            self._snapshot = None

    def all(self) -> List[Post]:
        return list(self._current().posts)

    def featured(self) -> List[Post]:
        return featured(self._current().posts)

    def slugs(self) -> List[str]:
        return sorted(self._current().by_slug)

    def get(self, slug: str) -> Post:
        post = self._current().by_slug.get(slug)
        if post is None:
            raise PostNotFound(slug)
        return post
