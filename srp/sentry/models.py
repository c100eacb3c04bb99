"""Typed views of Sentry API resources."""

from __future__ import annotations

from dataclasses import dataclass

from srp.core.structured import StrDict, as_obj_list, as_str_dict, get_int, get_str


@dataclass(frozen=True, slots=True)
class Release:
    version: str
    date_created: str | None = None
    projects: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: StrDict) -> Release | None:
        version = get_str(data, "version")
        if version is None:
            return None
        slugs: list[str] = []
        for item in as_obj_list(data.get("projects")) or []:
            project = as_str_dict(item)
            slug = get_str(project, "slug") if project is not None else None
            if slug:
                slugs.append(slug)
        return cls(
            version=version,
            date_created=get_str(data, "dateCreated"),
            projects=tuple(slugs),
        )


@dataclass(frozen=True, slots=True)
class ReleaseFile:
    """A file (artifact) attached to a release.

    `name` is the URL the file is matched against, e.g. `~/index.bundle.js`.
    """

    id: str
    name: str
    size: int = 0

    @classmethod
    def from_dict(cls, data: StrDict) -> ReleaseFile | None:
        name = get_str(data, "name")
        if name is None:
            return None
        # Sentry sends ids as strings; older servers used ints
        raw_id = data.get("id")
        file_id = str(raw_id) if isinstance(raw_id, (str, int)) else ""
        return cls(id=file_id, name=name, size=get_int(data, "size") or 0)
