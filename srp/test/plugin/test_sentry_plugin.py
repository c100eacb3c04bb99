"""End-to-end tests for SentryPlugin: build, create release, upload, clean up."""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest

from srp.core.result import Ok
from srp.output.console import MockConsole
from srp.plugin.options import PluginOptions
from srp.plugin.plugin import ERROR_PREFIX, SentryPlugin
from srp.sentry.api import SentryApi
from srp.test.helpers.assertion import (
    expect_release_contains_file,
    expect_release_does_not_contain_file,
    file_names,
)
from srp.test.helpers.bundler import FIXTURES, create_bundler_config, run_build
from srp.test.helpers.sentry import (
    FakeSentry,
    clean_up_release,
    fetch_files,
    fetch_release,
)

TWO_ENTRIES = {"foo": FIXTURES / "foo.js", "bar": FIXTURES / "bar.js"}


def _plugin(api: SentryApi, **options: object) -> SentryPlugin:
    return SentryPlugin(api, PluginOptions(**options))  # type: ignore[arg-type]


class TestCreatingRelease:
    @pytest.fixture(autouse=True)
    def _cleanup(self, api: SentryApi) -> Iterator[None]:
        yield
        clean_up_release(api, "string-release")
        clean_up_release(api, "function-release")

    def test_with_string_version(self, api: SentryApi, output_path: Path) -> None:
        release = "string-release"

        run_build(create_bundler_config(output_path), _plugin(api, release=release))

        assert fetch_release(api, release).version == release

    def test_with_version_from_function(self, api: SentryApi, output_path: Path) -> None:
        release = "function-release"

        run_build(create_bundler_config(output_path), _plugin(api, release=lambda: release))

        assert fetch_release(api, release).version == release

    def test_release_is_attached_to_project(self, api: SentryApi, output_path: Path) -> None:
        run_build(create_bundler_config(output_path), _plugin(api, release="string-release"))

        assert fetch_release(api, "string-release").projects == ("web",)

    def test_cleanup_removes_release(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path
    ) -> None:
        run_build(create_bundler_config(output_path), _plugin(api, release="string-release"))

        clean_up_release(api, "string-release")

        assert "string-release" not in sentry.releases


class TestUploadingFiles:
    release = "test-release"

    @pytest.fixture(autouse=True)
    def _cleanup(self, api: SentryApi) -> Iterator[None]:
        yield
        clean_up_release(api, self.release)

    def test_uploads_source_and_matching_source_map(
        self, api: SentryApi, output_path: Path
    ) -> None:
        run_build(create_bundler_config(output_path), _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/index.bundle.js")
        expect_release_contains_file(files, "~/index.bundle.js.map")

    def test_uploads_source_map_with_custom_source_map_filename(
        self, api: SentryApi, output_path: Path
    ) -> None:
        config = create_bundler_config(
            output_path, source_map_filename="renamed-the-sourcemap.map"
        )

        run_build(config, _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/index.bundle.js")
        expect_release_contains_file(files, "~/renamed-the-sourcemap.map")

    def test_uploads_source_map_from_dedicated_source_map_plugin(
        self, api: SentryApi, output_path: Path
    ) -> None:
        config = create_bundler_config(
            output_path, devtool=None, source_map_filename="renamed-the-sourcemap.map"
        )

        run_build(config, _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/index.bundle.js")
        expect_release_contains_file(files, "~/renamed-the-sourcemap.map")

    def test_uploads_source_and_source_map_with_hidden_source_map(
        self, api: SentryApi, output_path: Path
    ) -> None:
        config = create_bundler_config(output_path, devtool="hidden-source-map")

        run_build(config, _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/index.bundle.js")
        expect_release_contains_file(files, "~/index.bundle.js.map")

    def test_uploads_source_only_with_eval(self, api: SentryApi, output_path: Path) -> None:
        config = create_bundler_config(output_path, devtool="eval")

        run_build(config, _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/index.bundle.js")
        expect_release_does_not_contain_file(files, "~/index.bundle.js.map")

    def test_filters_files_based_on_include(self, api: SentryApi, output_path: Path) -> None:
        config = create_bundler_config(output_path, entry=TWO_ENTRIES)

        run_build(config, _plugin(api, release=self.release, include=r"foo\.bundle\.js"))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/foo.bundle.js")
        expect_release_contains_file(files, "~/foo.bundle.js.map")
        expect_release_does_not_contain_file(files, "~/bar.bundle.js")
        expect_release_does_not_contain_file(files, "~/bar.bundle.js.map")

    def test_filters_files_based_on_exclude(self, api: SentryApi, output_path: Path) -> None:
        config = create_bundler_config(output_path, entry=TWO_ENTRIES)

        run_build(config, _plugin(api, release=self.release, exclude=r"foo\.bundle\.js"))

        files = fetch_files(api, self.release)
        expect_release_does_not_contain_file(files, "~/foo.bundle.js")
        expect_release_does_not_contain_file(files, "~/foo.bundle.js.map")
        expect_release_contains_file(files, "~/bar.bundle.js")
        expect_release_contains_file(files, "~/bar.bundle.js.map")

    def test_include_and_exclude_accept_lists(self, api: SentryApi, output_path: Path) -> None:
        config = create_bundler_config(output_path, entry=TWO_ENTRIES)
        plugin = _plugin(
            api,
            release=self.release,
            include=[r"\.js$", r"\.map$"],
            exclude=[r"^bar\.bundle\.js$"],
        )

        run_build(config, plugin)

        assert file_names(fetch_files(api, self.release)) == {
            "~/foo.bundle.js",
            "~/foo.bundle.js.map",
            "~/bar.bundle.js.map",
        }

    def test_transforms_filename(self, api: SentryApi, output_path: Path) -> None:
        plugin = _plugin(
            api,
            release=self.release,
            include=r"index\.bundle\.js\.map",
            filename_transform=lambda filename: f"a-filename-prefix-{filename}",
        )

        run_build(create_bundler_config(output_path), plugin)

        files = fetch_files(api, self.release)
        assert file_names(files) == {"a-filename-prefix-index.bundle.js.map"}

    def test_uploaded_file_set_matches_emitted_output(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path
    ) -> None:
        config = create_bundler_config(output_path, entry=TWO_ENTRIES)

        compilation = run_build(config, _plugin(api, release=self.release))

        assert file_names(fetch_files(api, self.release)) == {
            f"~/{name}" for name in compilation.asset_names
        }
        for name in compilation.asset_names:
            content = (output_path / name).read_bytes()
            assert sentry.contents[(self.release, f"~/{name}")] == content

    def test_file_listing_spans_pages(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path
    ) -> None:
        sentry.page_size = 1
        config = create_bundler_config(output_path, entry=TWO_ENTRIES)

        compilation = run_build(config, _plugin(api, release=self.release))

        assert len(compilation.asset_names) > 1
        assert file_names(fetch_files(api, self.release)) == {
            f"~/{name}" for name in compilation.asset_names
        }

    def test_nested_assets_keep_relative_names(self, api: SentryApi, output_path: Path) -> None:
        config = create_bundler_config(output_path, filename="js/[name].bundle.js")
        (output_path / "js").mkdir()

        run_build(config, _plugin(api, release=self.release))

        files = fetch_files(api, self.release)
        expect_release_contains_file(files, "~/js/index.bundle.js")
        expect_release_contains_file(files, "~/js/index.bundle.js.map")


class TestReportingFailures:
    def test_missing_release_is_an_error(self, api: SentryApi, output_path: Path) -> None:
        compilation = run_build(create_bundler_config(output_path), _plugin(api))

        assert compilation.errors == [f"{ERROR_PREFIX}Release is required"]

    def test_function_returning_blank_is_missing_release(
        self, api: SentryApi, output_path: Path
    ) -> None:
        plugin = _plugin(api, release=lambda: " ")

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert compilation.errors == [f"{ERROR_PREFIX}Release is required"]

    def test_suppress_errors_reports_warnings(self, api: SentryApi, output_path: Path) -> None:
        compilation = run_build(
            create_bundler_config(output_path), _plugin(api, suppress_errors=True)
        )

        assert compilation.errors == []
        assert compilation.warnings == [f"{ERROR_PREFIX}Release is required"]

    def test_existing_release_is_an_error(self, api: SentryApi, output_path: Path) -> None:
        assert isinstance(api.create_release("dup"), Ok)

        compilation = run_build(create_bundler_config(output_path), _plugin(api, release="dup"))

        assert len(compilation.errors) == 1
        assert "already exists" in compilation.errors[0]
        assert fetch_files(api, "dup") == []

    def test_suppress_conflict_error_reuses_release(
        self, api: SentryApi, output_path: Path
    ) -> None:
        assert isinstance(api.create_release("dup"), Ok)
        plugin = _plugin(api, release="dup", suppress_conflict_error=True)

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert compilation.errors == []
        expect_release_contains_file(fetch_files(api, "dup"), "~/index.bundle.js")

    def test_rejected_upload_is_reported_and_others_continue(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path
    ) -> None:
        # A duplicate name is rejected by Sentry with 409
        plugin = _plugin(
            api,
            release="collide",
            filename_transform=lambda _name: "~/same-name.js",
        )

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert len(plugin.uploaded) == 1
        assert len(compilation.errors) == 1
        assert "Failed to upload ~/same-name.js" in compilation.errors[0]
        assert "already exists" in compilation.errors[0]
        clean_up_release(api, "collide")

    def test_unauthorized_token_is_reported(self, sentry: FakeSentry, output_path: Path) -> None:
        api = SentryApi(
            sentry,
            organization=sentry.organization,
            project="web",
            api_key="wrong",
            base_url=sentry.base_url,
        )

        compilation = run_build(create_bundler_config(output_path), _plugin(api, release="x"))

        assert compilation.errors == [f"{ERROR_PREFIX}Invalid token (x)"]
        assert sentry.releases == {}

    @pytest.mark.parametrize(
        "options",
        [{"include": ["["]}, {"exclude": "(vendor"}, {"delete_regex": "["}],
    )
    def test_invalid_pattern_is_reported_before_release_is_created(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path, options: dict[str, object]
    ) -> None:
        plugin = _plugin(api, release="bad-pattern", **options)

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert len(compilation.errors) == 1
        assert compilation.errors[0].startswith(f"{ERROR_PREFIX}Invalid pattern:")
        assert plugin.version is None
        assert sentry.releases == {}

    def test_missing_release_leaves_version_unset(
        self, api: SentryApi, output_path: Path
    ) -> None:
        plugin = _plugin(api)

        run_build(create_bundler_config(output_path), plugin)

        assert plugin.version is None


class TestReleaseBody:
    def test_custom_body_is_sent(self, api: SentryApi, output_path: Path) -> None:
        def body(version: str, project: str) -> dict[str, object]:
            return {"version": version, "projects": [project, "web-legacy"]}

        plugin = _plugin(api, release="b1", release_body=body)

        run_build(create_bundler_config(output_path), plugin)

        assert fetch_release(api, "b1").projects == ("web", "web-legacy")
        clean_up_release(api, "b1")


class TestDeleteAfterCompile:
    def test_deletes_source_maps_after_upload(self, api: SentryApi, output_path: Path) -> None:
        plugin = _plugin(api, release="d1", delete_after_compile=True)

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert (output_path / "index.bundle.js").exists()
        assert not (output_path / "index.bundle.js.map").exists()
        assert compilation.asset_names == ["index.bundle.js"]
        expect_release_contains_file(fetch_files(api, "d1"), "~/index.bundle.js.map")
        clean_up_release(api, "d1")

    def test_custom_delete_regex(self, api: SentryApi, output_path: Path) -> None:
        plugin = _plugin(
            api, release="d2", delete_after_compile=True, delete_regex=r"index\.bundle\.js$"
        )

        run_build(create_bundler_config(output_path), plugin)

        assert not (output_path / "index.bundle.js").exists()
        assert (output_path / "index.bundle.js.map").exists()
        clean_up_release(api, "d2")

    def test_keeps_files_when_upload_failed(
        self, api: SentryApi, sentry: FakeSentry, output_path: Path
    ) -> None:
        sentry.fail("POST", api.releases_url(), 500, "Internal error")
        plugin = _plugin(api, release="d3", delete_after_compile=True)

        compilation = run_build(create_bundler_config(output_path), plugin)

        assert compilation.errors
        assert (output_path / "index.bundle.js.map").exists()

    def test_disabled_by_default(self, api: SentryApi, output_path: Path) -> None:
        run_build(create_bundler_config(output_path), _plugin(api, release="d4"))

        assert (output_path / "index.bundle.js.map").exists()
        clean_up_release(api, "d4")


class TestConsoleReporting:
    def test_reports_release_and_uploads(self, api: SentryApi, output_path: Path) -> None:
        console = MockConsole()
        plugin = SentryPlugin(api, PluginOptions(release="c1"), console=console)

        run_build(create_bundler_config(output_path), plugin)

        assert console.find("Created release c1")
        assert console.find("index.bundle.js -> ~/index.bundle.js")
        assert not console.has_error()
        clean_up_release(api, "c1")
