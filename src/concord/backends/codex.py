"""Codex CLI backend."""

from __future__ import annotations

from concord.backends.base import CLIBackend


class CodexBackend(CLIBackend):
    """Backend for Codex CLI."""

    name = "codex"
    display_name = "Codex CLI"
    provider = "OpenAI"

    def build_command(self, prompt: str) -> list[str]:
        cmd = [self.binary_path, "exec"]

        if self.default_model:
            cmd += ["-m", self.default_model]

        if self.auto_approve:
            cmd.append("--full-auto")

        cmd.extend(self.extra_args)

        # Prompt must be last
        cmd.append(prompt)
        return cmd
