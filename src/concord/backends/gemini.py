"""Gemini CLI backend."""

from __future__ import annotations

from concord.backends.base import CLIBackend


class GeminiBackend(CLIBackend):
    """Backend for Gemini CLI."""

    name = "gemini"
    display_name = "Gemini CLI"
    provider = "Google"

    def build_command(self, prompt: str) -> list[str]:
        cmd = [self.binary_path]

        if self.default_model:
            cmd += ["-m", self.default_model]

        if self.auto_approve:
            cmd.append("-y")

        cmd.extend(self.extra_args)

        # Positional arg must be last
        cmd.append(prompt)
        return cmd

    def _filter_stderr(self, stderr: str) -> str:
        """Filter known Node.js punycode deprecation warning from Gemini CLI."""
        lines = stderr.splitlines()
        filtered = [
            line for line in lines
            if "punycode" not in line.lower()
            and "DeprecationWarning" not in line
        ]
        return "\n".join(filtered).strip()
