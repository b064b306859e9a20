"""Tests for pagelite.orchestrator."""

from __future__ import annotations

import pytest

from pagelite.bundler import SKIP_MESSAGE, ToolRunner
from pagelite.errors import ExternalToolError, FileSystemError, RenderError
from pagelite.orchestrator import BuildState, Orchestrator
from pagelite.validators import ValidationError


def _orchestrator(runner) -> Orchestrator:
    return Orchestrator(runner=runner)


def test_run_build_renders_pages_and_bundles_used_islands(project, tool_runner) -> None:
    project.seed_counter_site()

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.state is BuildState.DONE
    assert report.transitions == [
        BuildState.SCANNING_PAGES,
        BuildState.RENDERING_PAGES,
        BuildState.DISCOVERING_ISLANDS,
        BuildState.BUNDLING_HYDRATION,
        BuildState.RECONCILING_OUTPUT,
        BuildState.FLUSHING_PAGES,
        BuildState.DONE,
    ]
    assert report.pages == ["about.html", "index.html"]
    assert report.used.identifiers() == ["Counter"]
    assert report.bundle is not None
    assert report.bundle.bundled == ["Counter"]
    assert report.bundle.missing == []
    assert report.css_path is None
    assert project.output_files() == ["about.html", "index.html", "islandRender.js"]

    bundle = project.output("islandRender.js").read_text(encoding="utf-8")
    assert '"Counter": Counter,' in bundle
    assert "Logo" not in bundle

    index = project.output("index.html").read_text(encoding="utf-8")
    assert index.startswith("<!DOCTYPE html>\n<html>\n")
    assert (
        '<div id="island-1" data-island="Counter" '
        'data-props="{&#34;label&#34;: &#34;hits&#34;, &#34;start&#34;: 3}">'
    ) in index
    assert '<button class="counter">count is 3</button>' in index
    assert '<script type="module" src="./islandRender.js" defer></script>' in index

    about = project.output("about.html").read_text(encoding="utf-8")
    assert '<span class="logo">RP</span>' in about
    assert "data-island" not in about


def test_run_build_is_idempotent(project, tool_runner) -> None:
    project.seed_counter_site()
    orchestrator = _orchestrator(tool_runner)

    orchestrator.run_build(project.path())
    first = {name: project.output(name).read_bytes() for name in project.output_files()}
    report = orchestrator.run_build(project.path())
    second = {name: project.output(name).read_bytes() for name in project.output_files()}

    assert first == second
    assert report.orphans_removed == 0


def test_run_build_removes_orphaned_pages_only(project, tool_runner) -> None:
    project.seed_counter_site()
    orchestrator = _orchestrator(tool_runner)
    orchestrator.run_build(project.path())
    project.write({"dist/notes.txt": "hand written"})

    project.remove("src/pages/about.py")
    report = orchestrator.run_build(project.path())

    assert report.orphans_removed == 1
    assert report.pages == ["index.html"]
    assert project.output_files() == ["index.html", "islandRender.js", "notes.txt"]


def test_run_build_places_nested_pages_relative_to_bundle(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write(
        {
            "src/pages/blog/post.py": """
                from components.Counter import Counter
                from pagelite import Island


                def post():
                    return f"<article>{Island(Counter)}</article>"
            """,
        }
    )

    report = _orchestrator(tool_runner).run_build(project.path())

    assert "blog/post.html" in report.pages
    post = project.output("blog/post.html").read_text(encoding="utf-8")
    assert 'src="../islandRender.js"' in post
    index = project.output("index.html").read_text(encoding="utf-8")
    assert 'id="island-1"' in post
    assert 'id="island-2"' in index


def test_run_build_mirrors_static_assets(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write({"public/robots.txt": "User-agent: *", "public/img/logo.svg": "<svg/>"})

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.assets_copied == 2
    assert project.output("img/logo.svg").read_text(encoding="utf-8") == "<svg/>"


def test_run_build_mirrors_hidden_asset_directories(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write(
        {
            "public/.well-known/security.txt": "Contact: mailto:sec@example.com",
            "public/robots.txt": "User-agent: *",
        }
    )

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.assets_copied == 2
    assert project.output(".well-known/security.txt").is_file()


def test_run_build_mirrors_stylesheet_when_css_tool_is_skipped(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write({"public/styles.css": "body { margin: 0; }"})

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.css_path is None
    assert project.output("styles.css").read_text(encoding="utf-8") == "body { margin: 0; }"


def test_run_build_prefers_generated_stylesheet_over_asset(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write(
        {
            "src/styles/globals.css": "@tailwind base;\n",
            "public/styles.css": "body { margin: 0; }",
        }
    )

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.css_path == project.output("styles.css").resolve()
    assert report.assets_copied == 0
    assert project.output("styles.css").read_text(encoding="utf-8") == "/* css */\n"


def test_run_build_without_islands_writes_noop_bundle(project, tool_runner) -> None:
    project.write({"src/pages/index.py": "def index():\n    return '<p>static</p>'\n"})

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.bundle is not None
    assert report.bundle.empty is True
    assert tool_runner.bundle_calls() == []
    assert SKIP_MESSAGE in project.output("islandRender.js").read_text(encoding="utf-8")
    assert project.output("index.html").read_text(encoding="utf-8") == "<p>static</p>\n"


def test_run_build_reports_unresolved_islands(project, tool_runner) -> None:
    project.write(
        {
            "src/pages/index.py": """
                from pagelite import Island


                def Widget():
                    return "<i>widget</i>"


                def index():
                    return f"<main>{Island(Widget)}</main>"
            """,
        }
    )

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.state is BuildState.DONE
    assert report.bundle.missing == ["Widget"]
    assert "Islands reference missing components: Widget" in report.warnings
    assert "<i>widget</i>" in project.output("index.html").read_text(encoding="utf-8")


def test_run_build_warns_on_duplicate_identifiers(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write(
        {"src/components/widgets/Counter.py": "def Counter(start=0):\n    return '<b>other</b>'\n"}
    )

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.state is BuildState.DONE
    assert (
        "Duplicate component name 'Counter' found in files: Counter.py, widgets/Counter.py"
        in report.warnings
    )
    assert report.bundle.bundled == ["Counter"]


def test_run_build_honours_configured_output_dir(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write({"config.yml": "outputDir: public_html\nbuildOptions:\n  sourcemap: true\n"})

    report = _orchestrator(tool_runner).run_build(project.path())

    assert report.output_dir == project.path("public_html").resolve()
    assert project.path("public_html/index.html").is_file()
    assert project.path("public_html/islandRender.js.map").is_file()
    assert not project.output().exists()


def test_run_build_failing_page_writes_nothing(project, tool_runner, caplog) -> None:
    project.seed_counter_site()
    project.write(
        {"src/pages/zz_broken.py": "def zz_broken():\n    raise ValueError('kaboom')\n"}
    )

    with pytest.raises(RenderError) as excinfo:
        _orchestrator(tool_runner).run_build(project.path())

    assert excinfo.value.page == "zz_broken.py"
    assert "kaboom" in str(excinfo.value)
    assert project.output_files() == []
    assert tool_runner.calls == []
    assert "Build failed during rendering_pages" in caplog.text


def test_run_build_rejects_invalid_component_before_rendering(project, tool_runner) -> None:
    project.seed_counter_site()
    project.write({"src/components/Banner.py": "Banner = \"<p>not callable</p>\"\n"})
    orchestrator = _orchestrator(tool_runner)

    with pytest.raises(ValidationError) as excinfo:
        orchestrator.run_build(project.path())

    assert any("Banner.py" in error for error in excinfo.value.errors)
    report = orchestrator.last_report
    assert report is not None
    assert report.state is BuildState.FAILED
    assert report.transitions == [BuildState.SCANNING_PAGES, BuildState.FAILED]
    assert tool_runner.calls == []
    assert not [name for name in project.output_files() if name.endswith(".html")]


def test_run_build_requires_pages_directory(project, tool_runner) -> None:
    project.write({"src/components/Logo.py": "def Logo():\n    return ''\n"})

    with pytest.raises(FileSystemError):
        _orchestrator(tool_runner).run_build(project.path())


def test_run_build_tool_failure_flushes_no_pages(project) -> None:
    project.seed_counter_site()

    def failing(args, *, cwd):
        raise FileNotFoundError(args[0])

    with pytest.raises(ExternalToolError):
        _orchestrator(ToolRunner(runner=failing)).run_build(project.path())

    assert "index.html" not in project.output_files()
    assert "about.html" not in project.output_files()


def test_run_components_only_bundles_every_component(project, tool_runner) -> None:
    project.seed_counter_site()

    result = _orchestrator(tool_runner).run_components_only(project.path())

    assert result.bundled == ["Counter", "Logo"]
    assert project.output_files() == ["islandRender.js"]
