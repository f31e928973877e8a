import os
import subprocess
from datetime import datetime

import pytest

import vapt_runner
from vapt_runner import RunState, ToolInventory, make_context


FIXED_NOW = datetime(2024, 1, 2, 3, 4, 5)


@pytest.fixture
def make_state(tmp_path):
    """Build a RunState for example.com whose inventory holds only `tools`."""
    def _make(tools=(), **kwargs):
        ctx = make_context("example.com", str(tmp_path), now=FIXED_NOW)
        os.makedirs(ctx.outdir)
        inventory = ToolInventory({name: f"/usr/bin/{name}" for name in tools})
        state = RunState(ctx=ctx, tools=inventory, total=len(vapt_runner.STEPS), **kwargs)
        state.current_step = "test step"
        return state
    return _make


@pytest.fixture
def fake_run(monkeypatch):
    """
    Replace subprocess.run. Every call is recorded in `fake_run.calls`;
    `fake_run.outputs[tool] = (text, returncode)` controls what a tool
    "prints" into a captured log file and how it exits.
    """
    calls = []
    outputs = {}

    def _run(cmd, stdout=None, stderr=None, timeout=None):
        calls.append(list(cmd))
        text, code = outputs.get(os.path.basename(cmd[0]), ("", 0))
        if hasattr(stdout, "write"):
            stdout.write(text)
        return subprocess.CompletedProcess(cmd, code)

    monkeypatch.setattr(vapt_runner.subprocess, "run", _run)
    _run.calls = calls
    _run.outputs = outputs
    return _run


@pytest.fixture
def answers(monkeypatch):
    """Feed canned answers to input() prompts, in order."""
    def _set(*replies):
        it = iter(replies)
        monkeypatch.setattr("builtins.input", lambda prompt="": next(it))
    return _set
