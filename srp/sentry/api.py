"""Sentry release API.

Only the handful of endpoints needed to manage releases and their files:

    POST   /organizations/{org}/releases/
    GET    /organizations/{org}/releases/{version}/
    DELETE /organizations/{org}/releases/{version}/
    GET    /organizations/{org}/releases/{version}/files/
    POST   /organizations/{org}/releases/{version}/files/

All calls authenticate with a bearer token and return Results.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from urllib.parse import quote

from srp.core.config import DEFAULT_BASE_URL, SentryConfig
from srp.core.result import Err, Ok, Result
from srp.core.structured import as_obj_list, as_str_dict, get_str

from .errors import InvalidResponse, ReleaseConflict, ReleaseNotFound, RequestFailed, SentryError
from .http import FilePart, HttpClient, HttpError
from .models import Release, ReleaseFile

__all__ = ["SentryApi"]


def _detail(error: HttpError) -> str:
    """Prefer Sentry's `detail` field over the bare HTTP reason."""
    if error.body:
        try:
            data = as_str_dict(json.loads(error.body))
        except json.JSONDecodeError:
            data = None
        if data is not None:
            detail = get_str(data, "detail")
            if detail:
                return detail
    return str(error)


def _map_error(error: HttpError, version: str | None = None) -> SentryError:
    if version is not None and error.status == 409:
        return ReleaseConflict(version=version)
    if version is not None and error.status == 404:
        return ReleaseNotFound(version=version)
    hint = None
    if error.status in (401, 403):
        hint = "Check SENTRY_AUTH_TOKEN and its project:releases scope"
    elif error.status == 0:
        hint = "Check SENTRY_URL and network connectivity"
    return RequestFailed(http=error, message=_detail(error), hint=hint)


class SentryApi:
    """Client for one organization/project pair."""

    def __init__(
        self,
        http: HttpClient,
        *,
        organization: str,
        project: str,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self._http = http
        self.organization = organization
        self.project = project
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")

    @classmethod
    def from_config(cls, http: HttpClient, config: SentryConfig) -> SentryApi:
        """Build a client from config. Call `config.missing()` first."""
        return cls(
            http,
            organization=config.organization or "",
            project=config.project or "",
            api_key=config.api_key or "",
            base_url=config.base_url,
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._api_key}"}

    def releases_url(self) -> str:
        return f"{self.base_url}/organizations/{quote(self.organization, safe='')}/releases/"

    def release_url(self, version: str) -> str:
        return f"{self.releases_url()}{quote(version, safe='')}/"

    def files_url(self, version: str) -> str:
        return f"{self.release_url(version)}files/"

    def create_release(
        self, version: str, body: Mapping[str, object] | None = None
    ) -> Result[Release, SentryError]:
        """Create a release attached to this project.

        Args:
            version: Release version string.
            body: Full request payload; defaults to the version plus this
                project.

        Returns:
            Ok(Release), or Err(ReleaseConflict) if it already exists.
        """
        payload: dict[str, object]
        if body is not None:
            payload = dict(body)
        else:
            payload = {"version": version, "projects": [self.project]}
        url = self.releases_url()
        result = self._http.post_json(url, payload, headers=self._headers)
        if isinstance(result, Err):
            return Err(_map_error(result.error, version))
        return self._release_from(url, result.value, fallback_version=version)

    def fetch_release(self, version: str) -> Result[Release, SentryError]:
        url = self.release_url(version)
        result = self._http.get_json(url, headers=self._headers)
        if isinstance(result, Err):
            return Err(_map_error(result.error, version))
        return self._release_from(url, result.value)

    def delete_release(self, version: str) -> Result[None, SentryError]:
        result = self._http.delete(self.release_url(version), headers=self._headers)
        if isinstance(result, Err):
            return Err(_map_error(result.error, version))
        return Ok(None)

    def list_files(self, version: str) -> Result[list[ReleaseFile], SentryError]:
        """All files of a release, following Sentry's cursor pagination."""
        files: list[ReleaseFile] = []
        seen: set[str] = set()
        url: str | None = self.files_url(version)
        while url is not None and url not in seen:
            seen.add(url)
            result = self._http.get_json_page(url, headers=self._headers)
            if isinstance(result, Err):
                return Err(_map_error(result.error, version))

            items = as_obj_list(result.value.data)
            if items is None:
                return Err(InvalidResponse(url=url, message="Expected a JSON array of files"))
            for item in items:
                data = as_str_dict(item)
                release_file = ReleaseFile.from_dict(data) if data is not None else None
                if release_file is None:
                    return Err(
                        InvalidResponse(url=url, message=f"Malformed file entry: {item!r}")
                    )
                files.append(release_file)
            url = result.value.next_url
        return Ok(files)

    def upload_file(
        self, version: str, name: str, content: bytes
    ) -> Result[ReleaseFile, SentryError]:
        """Attach a file to a release under `name`."""
        url = self.files_url(version)
        filename = name.rsplit("/", 1)[-1] or name
        result = self._http.post_form(
            url,
            {"name": name},
            {"file": FilePart(filename=filename, content=content)},
            headers=self._headers,
        )
        if isinstance(result, Err):
            # 404 here means the release vanished; 409 a duplicate name
            return Err(_map_error(result.error))

        data = as_str_dict(result.value)
        release_file = ReleaseFile.from_dict(data) if data is not None else None
        if release_file is None:
            # Some servers answer 201 with an empty body
            return Ok(ReleaseFile(id="", name=name, size=len(content)))
        return Ok(release_file)

    def _release_from(
        self, url: str, value: object, *, fallback_version: str | None = None
    ) -> Result[Release, SentryError]:
        data = as_str_dict(value)
        release = Release.from_dict(data) if data is not None else None
        if release is None:
            if fallback_version is not None:
                return Ok(Release(version=fallback_version, projects=(self.project,)))
            return Err(InvalidResponse(url=url, message="Expected a release object"))
        return Ok(release)
