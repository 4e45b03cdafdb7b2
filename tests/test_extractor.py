from __future__ import annotations

from pathlib import Path

from extract.extractor import extract, extract_snippet, load_documents
from models.documents import CodeSnippet, Document
from rules.config import CheckerConfig


def _snippet(text: str, start_line: int = 1) -> CodeSnippet:
    return CodeSnippet(
        document="guide.md", language="kotlin", start_line=start_line, text=text
    )


def _refs(text: str, **kwargs: object) -> list[tuple[str, str, str | None]]:
    return [
        (ref.name, ref.kind, ref.qualified_name)
        for ref in extract_snippet(_snippet(text), **kwargs)  # type: ignore[arg-type]
    ]


def test_import_and_static_call_are_qualified() -> None:
    text = 'import io.cloudx.sdk.CloudX\n\nval banner = CloudX.createBanner("home")\n'

    assert _refs(text) == [
        ("CloudX", "class", "io.cloudx.sdk.CloudX"),
        ("createBanner", "method", "io.cloudx.sdk.CloudX.createBanner"),
    ]


def test_positions_map_to_document_lines() -> None:
    refs = extract_snippet(_snippet("import io.cloudx.sdk.CloudX", start_line=4))

    assert [(ref.line, ref.column) for ref in refs] == [(4, 22)]


def test_listener_object_and_callback_override() -> None:
    text = "\n".join(
        [
            "banner.listener = object : BannerListener {",
            "    override fun onAdLoaded(banner: Banner) {}",
            "}",
        ]
    )

    refs = {(name, kind) for name, kind, _ in _refs(text)}

    assert ("BannerListener", "class") in refs
    assert ("onAdLoaded", "method") in refs
    assert ("Banner", "class") in refs
    assert ("listener", "field") in refs


def test_bare_call_is_low_confidence() -> None:
    refs = extract_snippet(_snippet("load()"))

    assert len(refs) == 1
    assert refs[0].kind == "unknown"
    assert refs[0].low_confidence is True


def test_constants_and_nested_types() -> None:
    text = "val size = AdSize.MEDIUM_RECTANGLE\nval cfg = Ads.Builder()\n"

    assert _refs(text) == [
        ("MEDIUM_RECTANGLE", "constant", "AdSize.MEDIUM_RECTANGLE"),
        ("Builder", "class", "Ads.Builder"),
    ]


def test_import_alias_qualifies_later_uses() -> None:
    text = "import io.cloudx.sdk.CloudX as CX\nCX.initialize()\n"

    assert _refs(text) == [
        ("CloudX", "class", "io.cloudx.sdk.CloudX"),
        ("initialize", "method", "io.cloudx.sdk.CloudX.initialize"),
    ]


def test_ignored_symbols_and_packages_are_dropped() -> None:
    text = "\n".join(
        [
            "import android.content.Context",
            "import io.cloudx.sdk.CloudX",
            'Log.d("TAG", "msg")',
            "fun setup(context: Context) {",
            "    CloudX.initialize(context)",
            "}",
        ]
    )

    refs = _refs(text, ignore_symbols={"Log"}, ignore_packages={"android"})

    assert refs == [
        ("CloudX", "class", "io.cloudx.sdk.CloudX"),
        ("initialize", "method", "io.cloudx.sdk.CloudX.initialize"),
    ]


def test_comments_strings_and_local_functions_are_not_references() -> None:
    text = "\n".join(
        [
            "// CloudX.createNative()",
            'val label = "Banner.load()"',
            "fun helper() {}",
            "helper()",
        ]
    )

    refs = _refs(text)

    assert ("createNative", "method", "CloudX.createNative") not in refs
    assert all(name != "load" for name, _, _ in refs)
    assert ("helper", "unknown", None) in refs


def test_extract_filters_languages_and_keeps_document_order() -> None:
    documents = [
        Document(path="a.md", content="```kotlin\nload()\n```\n```python\nshow()\n```\n"),
        Document(path="b.md", content="```java\nshow();\n```\n"),
    ]

    sequential = list(extract(documents, {"kotlin", "java"}))
    parallel = list(extract(documents, {"kotlin", "java"}, jobs=4))

    assert [(ref.document, ref.name) for ref in sequential] == [
        ("a.md", "load"),
        ("b.md", "show"),
    ]
    assert parallel == sequential


def test_load_documents_collects_unreadable_files_as_warnings(tmp_path: Path) -> None:
    (tmp_path / "good.md").write_text("```kotlin\nload()\n```\n", encoding="utf-8")
    (tmp_path / "bad.md").write_bytes(b"\xff\xfe\x00broken")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    documents, warnings = load_documents(tmp_path, CheckerConfig())

    assert [document.path for document in documents] == ["good.md"]
    assert [warning.path for warning in warnings] == ["bad.md"]
    assert "UTF-8" in warnings[0].message


def test_fully_qualified_call_keeps_package_out_of_references() -> None:
    text = 'io.cloudx.sdk.CloudX.createBanner("home")\n'

    assert _refs(text) == [
        ("createBanner", "method", "io.cloudx.sdk.CloudX.createBanner"),
    ]


def test_fully_qualified_type_and_constructor() -> None:
    text = 'val banner: io.cloudx.sdk.Banner = io.cloudx.sdk.Banner("home")\n'

    assert _refs(text) == [
        ("Banner", "class", "io.cloudx.sdk.Banner"),
        ("Banner", "class", "io.cloudx.sdk.Banner"),
    ]


def test_fully_qualified_ignored_package_is_dropped() -> None:
    text = 'android.util.Log.d("TAG", "msg")\n'

    assert _refs(text, ignore_packages={"android"}) == []


def test_generic_calls_are_recognized() -> None:
    text = "\n".join(
        [
            'val banner = CloudX.create<Banner>("home")',
            "banner.load<String>()",
        ]
    )

    refs = _refs(text)

    assert ("create", "method", "CloudX.create") in refs
    assert ("Banner", "class", None) in refs
    assert ("load", "method", None) in refs
