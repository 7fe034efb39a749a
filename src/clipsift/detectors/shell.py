"""Shell command detector."""

from __future__ import annotations

import re

from clipsift.detectors.base import BaseDetector
from clipsift.models import ShellCommandDetection

COMMON_COMMANDS: frozenset[str] = frozenset({
    # files
    "ls", "cd", "pwd", "mkdir", "rmdir", "rm", "cp", "mv", "touch", "cat", "less", "more", "head", "tail",
    "find", "locate", "which", "whereis", "file", "stat", "chmod", "chown", "chgrp", "ln", "readlink",
    # text
    "grep", "egrep", "fgrep", "rg", "ag", "sed", "awk", "gawk", "sort", "uniq", "wc", "cut", "tr", "diff", "patch",
    "jq", "yq", "xq",
    # system
    "sudo", "su", "ps", "top", "htop", "btop", "kill", "killall", "pkill", "bg", "fg", "jobs", "nohup", "screen",
    "tmux", "systemctl", "service", "launchctl", "defaults", "open", "pbcopy", "pbpaste",
    # network
    "curl", "wget", "http", "httpie", "ssh", "scp", "sftp", "rsync", "ping", "netstat", "ss", "ifconfig", "ip",
    "nc", "netcat", "telnet", "dig", "nslookup", "host", "traceroute", "mtr", "nmap", "lsof",
    # package managers
    "apt", "apt-get", "dpkg", "yum", "dnf", "rpm", "pacman", "brew", "port",
    "npm", "npx", "yarn", "pnpm", "bun", "deno",
    "pip", "pip3", "pipx", "pipenv", "poetry", "uv", "conda",
    "gem", "bundle", "bundler", "cargo", "rustup", "go", "gofmt", "composer", "pod", "carthage",
    "swift", "swiftc", "xcodebuild", "xcrun", "xcode-select",
    "mix", "hex", "rebar3", "stack", "cabal", "ghc", "dotnet", "nuget", "maven", "mvn", "gradle", "gradlew",
    # version control
    "git", "gh", "hub", "svn", "hg", "fossil",
    # containers and cloud
    "docker", "docker-compose", "podman", "buildah", "skopeo",
    "kubectl", "k9s", "helm", "minikube", "kind", "vagrant", "packer",
    "terraform", "terragrunt", "pulumi", "cdktf",
    "aws", "gcloud", "az", "doctl", "flyctl", "vercel", "netlify", "heroku", "railway",
    # build
    "make", "cmake", "ninja", "meson", "bazel", "buck", "ant", "sbt", "task", "just", "mise", "asdf",
    # shells and runtimes
    "bash", "sh", "zsh", "fish", "dash", "ksh", "csh", "tcsh",
    "python", "python3", "python2", "ipython", "node", "nodejs", "ts-node", "tsx",
    "ruby", "irb", "rails", "rake", "perl", "php", "lua", "r", "rscript",
    "java", "javac", "jar", "kotlin", "kotlinc", "scala", "scalac", "erl", "elixir", "iex", "ghci", "runhaskell",
    # editors
    "vim", "nvim", "vi", "nano", "emacs", "code", "subl", "atom", "idea", "webstorm", "pycharm",
    # test and lint
    "jest", "vitest", "mocha", "pytest", "rspec", "phpunit",
    "eslint", "prettier", "black", "flake8", "pylint", "rubocop", "shellcheck", "hadolint",
    # misc
    "echo", "printf", "env", "export", "source", "alias", "unalias", "history", "man", "info", "tldr",
    "xargs", "tee", "time", "timeout", "watch", "cron", "crontab",
    "tar", "gzip", "gunzip", "bzip2", "xz", "zip", "unzip", "7z", "rar",
    "openssl", "base64", "md5", "sha256sum", "shasum",
    "date", "cal", "bc", "expr", "seq", "yes", "true", "false", "test", "sleep",
    "whoami", "id", "groups", "hostname", "uname",
    "df", "du", "free", "uptime", "w", "who", "last", "clear", "reset", "tput",
    "set", "unset", "declare", "local", "readonly",
    "if", "then", "else", "fi", "for", "do", "done", "while", "until", "case", "esac",
    "ffmpeg", "ffprobe", "imagemagick", "convert", "magick",
    "fzf", "bat", "exa", "eza", "fd", "sd", "delta", "difft", "hyperfine", "tokei", "dust", "duf", "procs", "btm",
    "bandwhich", "grex",
})

COMMON_SUBCOMMANDS: frozenset[str] = frozenset({
    "install", "uninstall", "update", "upgrade", "add", "remove", "rm", "del", "delete",
    "init", "create", "new", "build", "run", "start", "stop", "restart", "test", "dev", "serve",
    "push", "pull", "fetch", "clone", "commit", "checkout", "branch", "merge", "rebase", "stash", "log", "diff",
    "status", "exec", "attach", "logs", "ps", "images", "volume", "network", "compose",
    "apply", "get", "describe", "edit",
    "login", "logout", "whoami", "config", "set", "list", "show", "info", "version", "help",
})

# (pattern, weight); weights are scaled down so several signals add up without dominating.
_SHELL_PATTERNS: tuple[tuple[re.Pattern[str], float], ...] = tuple(
    (re.compile(p), w)
    for p, w in (
        (r"^\s*\$\s+", 0.95),
        (r"^\s*>\s+", 0.8),
        (r"^#!", 0.99),
        (r"\|\s*\w+", 0.9),
        (r"\s&&\s", 0.9),
        (r"\s\|\|\s", 0.9),
        (r"\s*;\s*\w+", 0.8),
        (r">\s*/dev/null", 0.95),
        (r"2>&1", 0.95),
        (r">\s*\S+", 0.7),
        (r"<\s*\S+", 0.7),
        (r"\$\([^)]+\)", 0.9),
        (r"`[^`]+`", 0.85),
        (r"\$\{\w+[^}]*\}", 0.85),
        (r"\$[A-Z_][A-Z0-9_]*", 0.7),
    )
)
_PATTERN_SCALE = 0.4

_FLAG_PATTERNS: tuple[tuple[re.Pattern[str], float], ...] = tuple(
    (re.compile(p), w)
    for p, w in (
        (r"\s--[a-z][-a-z0-9]*", 0.6),
        (r"\s--[a-z][-a-z0-9]*=", 0.7),
        (r"\s-[a-zA-Z]\s", 0.4),
        (r"\s-[a-zA-Z]$", 0.4),
        (r"\s-[a-zA-Z][a-zA-Z]+", 0.5),
    )
)
_FLAG_CAP = 0.4

_PROMPT_RE: re.Pattern[str] = re.compile(r"^\s*[$>%#]\s+")
_USER_PROMPT_RE: re.Pattern[str] = re.compile(r"^[^$#%>\s]*[$#%>]\s+")
_PATH_ARG_RE: re.Pattern[str] = re.compile(r"\s\S+/\S+")

_SENTENCE_WORDS = 8

MAX_INPUT_LENGTH = 1000
ACCEPT_THRESHOLD = 0.5


def score_line(line: str) -> ShellCommandDetection | None:
    """Score a single line; returns a detection when it clears the threshold."""
    trimmed = line.strip()
    if len(trimmed) < 2:
        return None

    command = _PROMPT_RE.sub("", trimmed, count=1)
    command = _USER_PROMPT_RE.sub("", command, count=1)
    words = command.split()
    if not words:
        return None
    # C preprocessor lines and // comments.
    if words[0].startswith("//") or (words[0].startswith("#") and not words[0].startswith("#!")):
        return None

    executable = words[0].rsplit("/", 1)[-1].lower()
    confidence = 0.0
    if executable in COMMON_COMMANDS:
        confidence += 0.65

    syntax = 0.0
    for pattern, weight in _SHELL_PATTERNS:
        if pattern.search(trimmed):
            syntax += weight * _PATTERN_SCALE

    flag_score = sum(weight for pattern, weight in _FLAG_PATTERNS if pattern.search(command))
    syntax += min(flag_score, _FLAG_CAP)

    # "If you want ..." starts with a shell keyword but is a sentence.
    if syntax == 0.0 and len(words) >= _SENTENCE_WORDS and command[-1] in ".!?":
        return None
    confidence += syntax

    if len(words) >= 2:
        if " -" in command or _PATH_ARG_RE.search(command):
            confidence += 0.15
        if words[1].lower() in COMMON_SUBCOMMANDS:
            confidence += 0.2

    confidence = min(confidence, 1.0)
    if confidence < ACCEPT_THRESHOLD:
        return None
    return ShellCommandDetection(command=command, executable=executable, confidence=confidence)


class ShellCommandDetector(BaseDetector):
    """Line-oriented shell command heuristic.

    Known executables, prompt prefixes, pipes, redirects, substitutions and
    flags each add to a line's score. Inputs that read like prose or exceed
    ``MAX_INPUT_LENGTH`` characters are rejected outright.
    """

    family = "shellCommands"

    def detect(self, text: str) -> list[ShellCommandDetection]:
        trimmed = text.strip()
        if not trimmed or len(trimmed) > MAX_INPUT_LENGTH:
            return []

        periods = trimmed.count(".")
        word_count = len(trimmed.split(" "))
        if periods > 2 and periods / word_count > 0.1:
            return []

        lines: list[tuple[str, tuple[int, int]]] = []
        offset = 0
        for raw in text.splitlines(keepends=True):
            line = raw.strip()
            if line and not line.startswith("#"):
                start = offset + (len(raw) - len(raw.lstrip()))
                lines.append((line, (start, start + len(line))))
            offset += len(raw)

        detections: list[ShellCommandDetection] = []
        for line, span in lines:
            d = score_line(line)
            if d is not None:
                detections.append(
                    ShellCommandDetection(command=d.command, executable=d.executable, confidence=d.confidence, span=span)
                )

        if detections:
            # Mostly non-command lines: a snippet that happens to call a tool.
            return detections if len(detections) / len(lines) >= 0.5 else []

        whole = score_line(trimmed)
        if whole is None:
            return []
        start = len(text) - len(text.lstrip())
        return [
            ShellCommandDetection(
                command=whole.command,
                executable=whole.executable,
                confidence=whole.confidence,
                span=(start, start + len(trimmed)),
            )
        ]
