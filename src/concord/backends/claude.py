"""Claude Code CLI backend."""

from __future__ import annotations

from concord.backends.base import CLIBackend


class ClaudeBackend(CLIBackend):
    """Backend for Claude Code CLI."""

    name = "claude"
    display_name = "Claude Code"
    provider = "Anthropic"

    def build_command(self, prompt: str) -> list[str]:
        cmd = [self.binary_path, "-p", prompt]

        if self.default_model:
            cmd += ["--model", self.default_model]

        if self.auto_approve:
            cmd += ["--permission-mode", "dontAsk"]

        cmd.extend(self.extra_args)
        return cmd
