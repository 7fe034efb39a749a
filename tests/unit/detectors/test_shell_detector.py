"""Tests for ShellCommandDetector."""

from __future__ import annotations

from clipsift.detectors.shell import MAX_INPUT_LENGTH, ShellCommandDetector, score_line


def test_git_command_with_flags() -> None:
    [d] = ShellCommandDetector().detect("git commit -m 'fix typo'")
    assert d.executable == "git"
    assert d.confidence == 1.0


def test_prompt_prefix_is_stripped() -> None:
    [d] = ShellCommandDetector().detect("$ ls -la /tmp")
    assert d.command == "ls -la /tmp"
    assert d.executable == "ls"


def test_multi_line_script_detected_per_line() -> None:
    text = "cd project\nnpm install\nnpm run build"
    found = ShellCommandDetector().detect(text)
    assert [d.command for d in found] == ["cd project", "npm install", "npm run build"]
    assert [text[s:e] for s, e in (d.span for d in found)] == text.splitlines()


def test_pipeline_without_known_executable() -> None:
    d = score_line("mytool --verbose | grep error")
    assert d is not None
    assert d.executable == "mytool"


def test_sentence_starting_with_keyword_rejected() -> None:
    assert ShellCommandDetector().detect("If you want to build this, run the tests first.") == []


def test_plain_prose_rejected() -> None:
    assert ShellCommandDetector().detect("The quick brown fox jumps over the lazy dog.") == []


def test_overlong_input_rejected() -> None:
    assert ShellCommandDetector().detect("ls " + "a" * MAX_INPUT_LENGTH) == []


def test_comment_lines_ignored() -> None:
    found = ShellCommandDetector().detect("# install deps\nbrew install jq")
    assert [d.command for d in found] == ["brew install jq"]


def test_preprocessor_and_comment_leads_rejected() -> None:
    assert score_line("#include <stdio.h>") is None
    assert score_line("// run make install") is None
    shebang = score_line("#!/bin/bash -e")
    assert shebang is not None
    assert shebang.executable == "bash"


def test_c_source_is_not_a_command() -> None:
    text = '#include <stdio.h>\n\nint main(void) {\n    printf("hi");\n    return 0;\n}'
    assert ShellCommandDetector().detect(text) == []


def test_snippet_with_few_command_lines_rejected() -> None:
    text = (
        "// greet the user\n"
        "export function greet(name) {\n"
        '  const message = "hi " + name;\n'
        "  console.log(message);\n"
        "  return message;\n"
        "}"
    )
    assert score_line("export function greet(name) {") is not None
    assert ShellCommandDetector().detect(text) == []
