"""Tests for output reconciliation."""

from __future__ import annotations

from pagelite.reconciler import (
    candidate_sources,
    cleanup_orphaned_generated,
    copy_static_assets,
    snapshot,
)


def _seed_output(project) -> None:
    project.write(
        {
            "src/pages/index.py": "def index():\n    return '<p></p>'\n",
            "src/pages/blog/post.py": "def post():\n    return '<p></p>'\n",
            "dist/index.html": "<p>home</p>",
            "dist/blog/post.html": "<p>post</p>",
            "dist/blog/old/draft.html": "<p>draft</p>",
            "dist/islandRender.js": "// bundle",
            "dist/notes.txt": "keep me",
        }
    )


def test_candidate_sources_map_back_to_page_modules(project) -> None:
    pages = project.path("src/pages")

    assert candidate_sources("blog/post.html", pages) == [pages / "blog" / "post.py"]


def test_cleanup_removes_only_orphaned_markup(project) -> None:
    _seed_output(project)

    removed = cleanup_orphaned_generated(project.output(), project.path("src/pages"))

    assert removed == 1
    assert project.output_files() == [
        "blog/post.html",
        "index.html",
        "islandRender.js",
        "notes.txt",
    ]
    assert not project.output("blog/old").exists()


def test_cleanup_is_idempotent(project) -> None:
    _seed_output(project)
    cleanup_orphaned_generated(project.output(), project.path("src/pages"))

    assert cleanup_orphaned_generated(project.output(), project.path("src/pages")) == 0


def test_cleanup_keeps_protected_asset_markup(project) -> None:
    _seed_output(project)
    project.write({"dist/404.html": "<p>lost</p>"})

    removed = cleanup_orphaned_generated(
        project.output(), project.path("src/pages"), protected={"404.html"}
    )

    assert removed == 1
    assert project.output("404.html").is_file()


def test_cleanup_of_missing_output_is_a_noop(project) -> None:
    assert cleanup_orphaned_generated(project.output(), project.path("src/pages")) == 0


def test_copy_static_assets_mirrors_and_overwrites(project) -> None:
    project.write(
        {
            "public/favicon.ico": "icon-v2",
            "public/images/logo.svg": "<svg/>",
            "dist/favicon.ico": "icon-v1",
        }
    )

    copied = copy_static_assets(project.path("public"), project.output())

    assert copied == 2
    assert project.output("favicon.ico").read_text(encoding="utf-8") == "icon-v2"
    assert project.output("images/logo.svg").read_text(encoding="utf-8") == "<svg/>"


def test_copy_static_assets_skips_paths_owned_by_the_build(project, caplog) -> None:
    project.write(
        {
            "public/styles.css": "body {}",
            "public/index.html": "<p>shadow</p>",
            "public/robots.txt": "User-agent: *",
        }
    )

    copied = copy_static_assets(
        project.path("public"), project.output(), reserved={"index.html", "styles.css"}
    )

    assert copied == 1
    assert project.output_files() == ["robots.txt"]
    assert "styles.css" in caplog.text
    assert "index.html" in caplog.text


def test_copy_static_assets_keeps_artifact_names_nobody_reserved(project) -> None:
    project.write({"public/styles.css": "body { color: red; }"})

    copied = copy_static_assets(project.path("public"), project.output())

    assert copied == 1
    assert project.output("styles.css").read_text(encoding="utf-8") == "body { color: red; }"


def test_copy_static_assets_includes_hidden_directories(project) -> None:
    project.write(
        {
            "public/.well-known/security.txt": "Contact: mailto:sec@example.com",
            "public/robots.txt": "User-agent: *",
        }
    )

    copied = copy_static_assets(project.path("public"), project.output())

    assert copied == 2
    assert project.output_files() == [".well-known/security.txt", "robots.txt"]


def test_copy_static_assets_without_asset_root(project) -> None:
    assert copy_static_assets(project.path("public"), project.output()) == 0


def test_snapshot_partitions_output_by_owner(project) -> None:
    _seed_output(project)
    project.write({"public/robots.txt": "User-agent: *", "dist/robots.txt": "User-agent: *"})

    state = snapshot(project.output(), project.path("src/pages"), project.path("public"))

    assert state.generated == ["blog/post.html", "index.html"]
    assert state.mirrored == ["robots.txt"]
    assert state.build_artifacts == ["islandRender.js"]
    assert state.unmanaged == ["blog/old/draft.html", "notes.txt"]
    assert len(state.all_files()) == 6
