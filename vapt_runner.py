#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Automated VAPT Runner: Recon → Web Scans → Summary → Archive
Usage: python vapt_runner.py [options]

For authorized testing only. The script asks for the target and for an
explicit confirmation that you hold WRITTEN permission from its owner.

---------------------------------------------------------------------------
HOW IT WORKS:
  A fixed list of 14 steps runs one after the other. Each step calls an
  external tool with a fixed set of flags and saves the tool's raw output in
  VAPT_<target>_<timestamp>/. Nothing is parsed, with one exception: if
  whatweb's output mentions WordPress, wpscan is run as well.

  A missing tool never stops the run. A short note is written in place of
  the tool's output and the next step starts. Exit codes are recorded in
  run_log.json and SUMMARY.txt, but a failing tool never aborts the sweep.

STEPS:
   1  WHOIS                          8  Directory brute force (gobuster)
   2  DNS (dig)                      9  SSL/TLS checks (curl + nmap)
   3  Subdomains (sublist3r)        10  SQLMap quick (low risk)
   4  Nmap full port scan           11  CMS detection (whatweb)
   5  Nmap NSE vuln scripts         12  WPScan if WordPress detected
   6  Nikto                         13  OWASP ZAP (manual instructions)
   7  Wapiti                        14  Summary + archive

SECRETS:
  The wpscan API token is read from WPSCAN_API_TOKEN (environment, or a .env
  file in the working directory). Without it wpscan runs unauthenticated.

LIMITATIONS:
  There is no timeout by default. A tool that hangs blocks the whole
  pipeline; pass --timeout <seconds> to cap every tool invocation.
  Ctrl-C stops the running tool and ends the sweep.

OUTPUT:
  VAPT_<target>_<YYYYMMDD_HHMMSS>/       raw tool output + SUMMARY.txt
  VAPT_<target>_<YYYYMMDD_HHMMSS>.zip    (.tar.gz if the zip cannot be made)
---------------------------------------------------------------------------
"""

import argparse
import getpass
import json
import os
import platform
import re
import shutil
import subprocess
import sys
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional

from dotenv import load_dotenv

import web_fallbacks


# ╔══════════════════════════════════════════════════════════════════════════════╗
# ║                        !! USER CONFIG - EDIT HERE !!                        ║
# ╚══════════════════════════════════════════════════════════════════════════════╝

# Width of the terminal progress bar in characters.
BAR_WIDTH = 50

# Wordlist for gobuster. Override per run with --wordlist.
# Kali/Parrot ship this one with the 'dirb' package.
DEFAULT_WORDLIST = "/usr/share/wordlists/dirb/common.txt"

# NSE script categories/scripts for step 5.
NMAP_SCRIPTS = "default,vuln,ssl-cert,ssl-enum-ciphers"

# wpscan enumeration: users, all plugins, all themes, timthumbs,
# config backups, db exports.
WPSCAN_ENUMERATE = "u,ap,at,tt,cb,dbe"

# Environment variable holding the wpscan API token (may live in .env).
WPSCAN_TOKEN_ENV = "WPSCAN_API_TOKEN"


# ─── Constants ────────────────────────────────────────────────────────────────

# Tools probed once at startup. Every one of them is reported in SUMMARY.txt.
TOOLS = [
    "whois", "dig", "sublist3r", "nmap", "nikto", "wapiti", "sqlmap",
    "wpscan", "whatweb", "curl", "gobuster", "sslyze", "sslscan",
]

# ZAP ships under two names depending on the distro package.
ZAP_BINARIES = ["zaproxy", "owasp-zap"]

# Outcome of a single tool invocation.
RAN_OK = "ran-ok"
RAN_NONZERO = "ran-with-nonzero-exit"
SKIPPED_MISSING = "skipped-missing-dependency"
SKIPPED_CONDITION = "skipped-condition"
TIMED_OUT = "timed-out"

WORDPRESS_MARKER = "wordpress"
WHATWEB_ARTIFACTS = ["whatweb_http.txt", "whatweb_https.txt"]

ADVISORY_NOTES = [
    "- Manual follow up is required for OWASP ZAP and deeper manual exploitation (outside scope).",
    "- SQLMap was run in low-risk mode. Do not run high risk/dump options without explicit permission.",
]

ZAP_INSTRUCTIONS = [
    "ZAP instructions:",
    "1) Start ZAP (zaproxy)",
    "2) Set browser proxy to 127.0.0.1:8080",
    "3) Browse site to populate sites tree",
    "4) Right-click target > Attack > Active Scan",
]

SCHEME_RE = re.compile(r"^https?://", re.IGNORECASE)


# ─── Helpers ──────────────────────────────────────────────────────────────────

def banner():
    print("""
╔══════════════════════════════════════╗
║   Automated VAPT (Basic → Interm.)   ║
║     For authorized testing only      ║
╚══════════════════════════════════════╝
""")


def section(title):
    print(f"\n{'─' * 55}")
    print(f"  {title}")
    print('─' * 55)


def ok(msg):   print(f"  [+] {msg}")
def warn(msg): print(f"  [!] {msg}")
def info(msg): print(f"  [*] {msg}")
def miss(msg): print(f"  [-] {msg}")


def write_text(path, text):
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(text)


def check_tool(name):
    """
    Return the full path to an external tool if it can be found, or None.

    Checks PATH first, then falls back to common installation directories
    that are often missing from PATH when running under sudo (e.g. ~/go/bin
    for gobuster, ~/.local/bin for pipx installs of sublist3r/wapiti).
    """
    found = shutil.which(name)
    if found:
        return found

    # sudo resets HOME to /root, so look up the invoking user's real home.
    user_home = None
    sudo_user = os.environ.get("SUDO_USER")
    if sudo_user:
        try:
            import pwd
            user_home = pwd.getpwnam(sudo_user).pw_dir
        except (ImportError, KeyError):
            pass

    if not user_home:
        user_home = os.path.expanduser("~")

    extra_dirs = [
        os.path.join(user_home, ".local", "bin"),  # pipx / pip --user
        os.path.join(user_home, "go", "bin"),      # go install gobuster
        "/usr/local/bin",
        "/usr/local/sbin",
        "/snap/bin",                               # snap install zaproxy
        "/root/go/bin",
    ]

    for directory in extra_dirs:
        candidate = os.path.join(directory, name)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate

    return None


# ─── Data model ───────────────────────────────────────────────────────────────

class ToolInventory:
    """Read-only map of tool name → resolved executable path (None if absent)."""

    def __init__(self, paths: Dict[str, Optional[str]]):
        self._paths = dict(paths)

    @classmethod
    def probe(cls, names=None):
        paths = {name: check_tool(name) for name in (names or TOOLS)}
        paths["zaproxy"] = next(
            (p for p in (check_tool(b) for b in ZAP_BINARIES) if p), None
        )
        return cls(paths)

    def available(self, name) -> bool:
        return self._paths.get(name) is not None

    def path(self, name) -> Optional[str]:
        return self._paths.get(name)

    def as_flags(self) -> Dict[str, bool]:
        return {name: path is not None for name, path in self._paths.items()}


@dataclass(frozen=True)
class RunContext:
    target: str      # as typed by the operator
    host: str        # scheme stripped; what the tools are pointed at
    timestamp: str   # YYYYMMDD_HHMMSS
    outdir: str

    def artifact(self, name):
        return os.path.join(self.outdir, name)

    def url(self, scheme):
        return f"{scheme}://{self.host}"


@dataclass
class StepOutcome:
    step: str
    tool: str
    artifact: str
    status: str
    exit_code: Optional[int] = None
    command: str = ""


@dataclass
class RunState:
    """Everything the steps share. Passed explicitly from step to step."""
    ctx: RunContext
    tools: ToolInventory
    total: int
    completed: int = 0
    current_step: str = ""
    outcomes: List[StepOutcome] = field(default_factory=list)
    timeout: Optional[float] = None
    wordlist: str = DEFAULT_WORDLIST
    builtin_fallbacks: bool = False
    wpscan_token: Optional[str] = None
    archive: Optional[str] = None


@dataclass(frozen=True)
class Step:
    name: str
    done: str
    action: Callable[[RunState], None]


# ─── Target & run context ─────────────────────────────────────────────────────

def strip_scheme(target):
    return SCHEME_RE.sub("", target.strip(), count=1)


def sanitize_target(target):
    """'https://example.com/app' → 'example.com_app' (safe for a directory name)."""
    return strip_scheme(target).replace("/", "_")


def output_dir_name(target, timestamp):
    return f"VAPT_{sanitize_target(target)}_{timestamp}"


def make_context(target, output_root=".", now=None):
    timestamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return RunContext(
        target=target.strip(),
        host=strip_scheme(target).rstrip("/"),
        timestamp=timestamp,
        outdir=os.path.join(output_root, output_dir_name(target, timestamp)),
    )


# ─── Consent gate ─────────────────────────────────────────────────────────────

def ask(prompt):
    # Ctrl-D / Ctrl-C at a prompt counts as "no answer".
    try:
        return input(prompt)
    except (EOFError, KeyboardInterrupt):
        print()
        return ""


def consent_gate():
    """
    Ask for the target and the permission confirmation. Exits with status 1
    if the target is empty or the answer is anything other than 'yes'.
    Nothing is written to disk before both answers are in.
    """
    target = ask("Enter target domain (e.g. example.com): ").strip()
    # "https://" alone leaves nothing to scan.
    if not strip_scheme(target).rstrip("/"):
        warn("No target provided. Exiting.")
        sys.exit(1)

    answer = ask("Confirm you have WRITTEN permission from the owner for testing (yes/no): ")
    if answer.strip().lower() != "yes":
        warn("You must have written permission to proceed. Exiting.")
        sys.exit(1)

    return target


# ─── Environment snapshot ─────────────────────────────────────────────────────

def snapshot_environment(ctx):
    u = platform.uname()
    write_text(ctx.artifact("env_uname.txt"),
               f"{u.system} {u.node} {u.release} {u.version} {u.machine}\n")

    try:
        release = platform.freedesktop_os_release()
    except (AttributeError, OSError):
        lsb = "OS release information not available.\n"
    else:
        lsb = "".join(f"{key}={value}\n" for key, value in sorted(release.items()))
    write_text(ctx.artifact("env_lsb.txt"), lsb)

    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = "unknown"
    write_text(ctx.artifact("README.txt"),
               f"Script run: {user} @ {datetime.now().strftime('%a %b %d %H:%M:%S %Y')}\n")


# ─── Progress ─────────────────────────────────────────────────────────────────

def render_progress(completed, total, label, width=BAR_WIDTH):
    completed = max(0, min(completed, total))
    filled = (completed * width) // total if total else width
    pct = (completed * 100) // total if total else 100
    return f"[{'#' * filled}{'-' * (width - filled)}] {pct:>3}%  {label}"


def report_progress(completed, total, label, width=BAR_WIDTH):
    print(f"\r{render_progress(completed, total, label, width)}")


# ─── Running tools ────────────────────────────────────────────────────────────

def record(state, outcome):
    state.outcomes.append(outcome)
    return outcome


def mask(cmd, secrets=()):
    secrets = {s for s in secrets if s}
    return " ".join("****" if part in secrets else part for part in cmd)


def write_note(state, tool, note_file, text, status=SKIPPED_MISSING):
    """Write a placeholder note in place of a tool's output and record the skip."""
    write_text(state.ctx.artifact(note_file), text + "\n")
    miss(text)
    return record(state, StepOutcome(step=state.current_step, tool=tool,
                                     artifact=note_file, status=status))


def require(state, tool, note_file, note=None):
    """True if `tool` is installed; otherwise write the note and return False."""
    if state.tools.available(tool):
        return True
    write_note(state, tool, note_file, note or f"{tool} not installed. Skipping.")
    return False


def run_tool(state, tool, args, output, log=None, discard=False,
             note_file=None, note=None, secrets=()):
    """
    Run one external tool for the current step and record what happened.

    Args:
        tool      : Key in the tool inventory (e.g. "nmap")
        args      : Arguments after the binary
        output    : Artifact this invocation produces, as recorded in the log
        log       : File (in the output dir) that receives stdout + stderr.
                    If None, output streams to the terminal (the tool writes
                    its own file) unless `discard` is set.
        note_file : Where the placeholder goes if the tool is missing
                    (defaults to `output`)
        secrets   : Argument values to mask when echoing the command

    A non-zero exit is recorded, never raised: the sweep always continues.
    """
    if not require(state, tool, note_file or output, note):
        return state.outcomes[-1]

    cmd = [state.tools.path(tool)] + list(args)
    shown = mask(cmd, secrets)
    info(f"Running: {shown}")

    outcome = StepOutcome(step=state.current_step, tool=tool, artifact=output,
                          status=RAN_OK, command=shown)
    try:
        if log:
            with open(state.ctx.artifact(log), "w", encoding="utf-8") as fh:
                result = subprocess.run(cmd, stdout=fh, stderr=subprocess.STDOUT,
                                        timeout=state.timeout)
        else:
            sink = subprocess.DEVNULL if discard else None
            result = subprocess.run(cmd, stdout=sink, stderr=sink,
                                    timeout=state.timeout)
    except subprocess.TimeoutExpired:
        # subprocess.run() has already killed the child at this point.
        warn(f"{tool} timed out after {state.timeout}s and was stopped.")
        outcome.status = TIMED_OUT
    except OSError as exc:
        warn(f"Could not start {tool}: {exc}")
        try:
            write_text(state.ctx.artifact(log or output), f"Could not start {tool}: {exc}\n")
        except OSError as write_exc:
            warn(f"Could not write {log or output}: {write_exc}")
        outcome.status = RAN_NONZERO
    else:
        outcome.exit_code = result.returncode
        if result.returncode != 0:
            warn(f"{tool} exited with code {result.returncode}, continuing.")
            outcome.status = RAN_NONZERO

    return record(state, outcome)


# ─── Steps ────────────────────────────────────────────────────────────────────

def step_whois(state):
    run_tool(state, "whois", [state.ctx.host], "whois.txt", log="whois.txt")


def step_dns(state):
    host = state.ctx.host
    if not state.tools.available("dig") and state.builtin_fallbacks:
        info("dig not found, using built-in DNS lookups (dnspython).")
        records, errors = web_fallbacks.dns_records(host)
        write_text(state.ctx.artifact("dig_any.txt"),
                   web_fallbacks.format_records(host, records, errors))
        ns, ns_errors = web_fallbacks.dns_records(host, ["NS"])
        write_text(state.ctx.artifact("dig_ns.txt"),
                   "".join(f"{value}\n" for _, value in ns)
                   + "".join(f";; {err}\n" for err in ns_errors))
        for name, failed in (("dig_any.txt", errors), ("dig_ns.txt", ns_errors)):
            if failed:
                warn(f"DNS lookup errors, see {name}.")
            record(state, StepOutcome(step=state.current_step, tool="dnspython",
                                      artifact=name,
                                      status=RAN_NONZERO if failed else RAN_OK))
        return

    run_tool(state, "dig", [host, "ANY", "+noall", "+answer"], "dig_any.txt", log="dig_any.txt")
    run_tool(state, "dig", ["+short", "NS", host], "dig_ns.txt", log="dig_ns.txt")


def step_subdomains(state):
    run_tool(state, "sublist3r",
             ["-d", state.ctx.host, "-o", state.ctx.artifact("subdomains.txt")],
             "subdomains.txt", log="sublist3r_stdout.txt",
             note="sublist3r not installed - skipping. Consider installing with pip.")


def step_nmap_full(state):
    info("Full TCP port scan. This may take a while.")
    run_tool(state, "nmap",
             ["-p-", "-T4", "-oA", state.ctx.artifact("nmap_full"), state.ctx.host],
             "nmap_full.nmap", log="nmap_full_stdout.txt",
             note_file="nmap_full.txt", note="nmap not installed. Skipping.")


def step_nmap_scripts(state):
    run_tool(state, "nmap",
             ["-sV", "--script", NMAP_SCRIPTS, "-oA", state.ctx.artifact("nmap_scripts"),
              state.ctx.host],
             "nmap_scripts.nmap", log="nmap_scripts_stdout.txt",
             note_file="nmap_scripts.txt", note="nmap not installed. Skipping script scans.")


def step_nikto(state):
    if not require(state, "nikto", "nikto_note.txt"):
        return
    for scheme in ("http", "https"):
        out = f"nikto_{scheme}.txt"
        run_tool(state, "nikto",
                 ["-host", state.ctx.url(scheme), "-output", state.ctx.artifact(out),
                  "-Format", "txt"],
                 out)


def step_wapiti(state):
    if not require(state, "wapiti", "wapiti_note.txt"):
        return
    for scheme in ("http", "https"):
        out = f"wapiti_{scheme}.txt"
        run_tool(state, "wapiti",
                 ["-u", state.ctx.url(scheme), "-f", "txt", "-o", state.ctx.artifact(out)],
                 out)


def step_gobuster(state):
    if not require(state, "gobuster", "gobuster_note.txt",
                   "gobuster not installed. Skipping directory brute force."):
        return
    wordlist = state.wordlist
    if not os.path.isfile(wordlist):
        write_note(state, "gobuster", "gobuster_note.txt",
                   f"No common wordlist found at {wordlist} - install wordlists or provide custom.",
                   status=SKIPPED_CONDITION)
        return
    for scheme in ("http", "https"):
        out = f"gobuster_{scheme}.txt"
        run_tool(state, "gobuster",
                 ["dir", "-u", state.ctx.url(scheme), "-w", wordlist,
                  "-o", state.ctx.artifact(out), "-q"],
                 out)


def step_ssl(state):
    for scheme in ("https", "http"):
        out = f"headers_{scheme}.txt"
        url = state.ctx.url(scheme)
        if not state.tools.available("curl") and state.builtin_fallbacks:
            info(f"curl not found, fetching {url} headers with requests.")
            write_text(state.ctx.artifact(out), web_fallbacks.fetch_headers(url))
            record(state, StepOutcome(step=state.current_step, tool="requests",
                                      artifact=out, status=RAN_OK))
        else:
            run_tool(state, "curl", ["-Is", url], out, log=out)

    run_tool(state, "nmap",
             ["--script", "ssl-enum-ciphers", "-p", "443", state.ctx.host,
              "-oN", state.ctx.artifact("nmap_ssl_enum.txt")],
             "nmap_ssl_enum.txt", discard=True)


def step_sqlmap(state):
    # Root page only, no crawling, lowest risk/level. Nothing is dumped.
    run_tool(state, "sqlmap",
             ["-u", state.ctx.url("http"), "--batch", "--risk=1", "--level=1",
              "--crawl=0", "--threads=1"],
             "sqlmap_dummy.txt", log="sqlmap_dummy.txt", note_file="sqlmap_note.txt")


def step_whatweb(state):
    if not require(state, "whatweb", "whatweb_note.txt",
                   "whatweb not installed. Skipping CMS detection."):
        return
    for scheme in ("http", "https"):
        out = f"whatweb_{scheme}.txt"
        run_tool(state, "whatweb", [state.ctx.url(scheme)], out, log=out)


def wordpress_detected(outdir):
    """True if either whatweb artifact mentions WordPress (any case)."""
    for name in WHATWEB_ARTIFACTS:
        try:
            with open(os.path.join(outdir, name), encoding="utf-8", errors="replace") as fh:
                if WORDPRESS_MARKER in fh.read().lower():
                    return True
        except OSError:
            continue
    return False


def step_wpscan(state):
    if not require(state, "wpscan", "wpscan_note.txt"):
        return
    if not wordpress_detected(state.ctx.outdir):
        write_note(state, "wpscan", "wpscan_note.txt",
                   "WordPress not detected. Skipping wpscan.", status=SKIPPED_CONDITION)
        return

    args = ["--url", state.ctx.url("https"), "--enumerate", WPSCAN_ENUMERATE]
    if state.wpscan_token:
        ok("WordPress detected, running wpscan with API token...")
        args += ["--api-token", state.wpscan_token]
    else:
        warn(f"WordPress detected but {WPSCAN_TOKEN_ENV} is not set.")
        warn("Running wpscan without vulnerability data from the WPScan API.")
    run_tool(state, "wpscan", args, "wpscan.txt", log="wpscan.txt",
             note_file="wpscan_note.txt", secrets=(state.wpscan_token,))


def step_zap(state):
    path = state.ctx.artifact("zap_instructions.txt")
    if not state.tools.available("zaproxy"):
        write_note(state, "zaproxy", "zap_instructions.txt",
                   "OWASP ZAP not installed or not available. Manual testing recommended.")
        return
    ok("OWASP ZAP is installed. Start it manually for interactive crawling and active scanning:")
    info("  - Run: zaproxy")
    info("  - Configure your browser to use proxy 127.0.0.1:8080 and browse the site "
         "to populate ZAP, then run active scan.")
    write_text(path, "\n".join(ZAP_INSTRUCTIONS) + "\n")
    info(f"Saved this instruction at {path}")


def write_summary(state):
    ctx = state.ctx
    lines = [
        "VAPT run summary",
        f"Target: {ctx.target}",
        f"Timestamp: {ctx.timestamp}",
        "Tools available (quick):",
    ]
    for name, present in sorted(state.tools.as_flags().items()):
        lines.append(f"{name} : {int(present)}")

    lines += ["", "Step outcomes:"]
    for o in state.outcomes:
        code = "" if o.exit_code is None else f" (exit {o.exit_code})"
        lines.append(f"{o.step} / {o.tool} -> {o.status}{code} [{o.artifact}]")

    lines += ["", "Notes:"] + ADVISORY_NOTES
    write_text(ctx.artifact("SUMMARY.txt"), "\n".join(lines) + "\n")


def write_run_log(state):
    with open(state.ctx.artifact("run_log.json"), "w", encoding="utf-8") as fh:
        json.dump([asdict(o) for o in state.outcomes], fh, indent=2)


ARCHIVE_EXTENSIONS = {"zip": ".zip", "gztar": ".tar.gz"}


def archive_results(outdir):
    """
    Pack the whole output directory (the directory itself included) into
    <outdir>.zip, or <outdir>.tar.gz if the zip cannot be created.
    Returns the archive path, or None if both formats failed.
    """
    base_name = os.path.abspath(outdir)
    root_dir, base_dir = os.path.split(base_name)
    for fmt, ext in ARCHIVE_EXTENSIONS.items():
        try:
            return shutil.make_archive(base_name, fmt, root_dir=root_dir, base_dir=base_dir)
        except (OSError, RuntimeError, ValueError) as exc:
            warn(f"Could not create {fmt} archive: {exc}")
            if os.path.exists(base_name + ext):
                os.remove(base_name + ext)
    return None


def step_summary(state):
    write_summary(state)
    write_run_log(state)
    state.archive = archive_results(state.ctx.outdir)
    if not state.archive:
        warn("No archive was created. Results are still in the output directory.")


STEPS = [
    Step("WHOIS", "WHOIS complete", step_whois),
    Step("DNS (dig)", "DNS complete", step_dns),
    Step("Subdomain enumeration (sublist3r)", "Subdomain enumeration complete", step_subdomains),
    Step("Nmap full port/service scan", "Nmap full scan complete", step_nmap_full),
    Step("Nmap vulnerability scripts", "Nmap NSE scripts complete", step_nmap_scripts),
    Step("Nikto web scan", "Nikto complete", step_nikto),
    Step("Wapiti web scan", "Wapiti complete", step_wapiti),
    Step("Directory brute force (gobuster - optional)", "Directory brute force step done", step_gobuster),
    Step("SSL/TLS checks", "SSL/TLS checks complete", step_ssl),
    Step("SQL injection quick (sqlmap - low risk)", "SQLMap quick scan complete", step_sqlmap),
    Step("CMS detection (whatweb)", "CMS detection complete", step_whatweb),
    Step("WPScan if WordPress", "WPScan step complete", step_wpscan),
    Step("OWASP ZAP (manual - start instructions)", "OWASP ZAP instruction saved", step_zap),
    Step("Assemble summary & archive", "Results archived", step_summary),
]


# ─── Pipeline ─────────────────────────────────────────────────────────────────

def run_steps(state, steps=None):
    """Run every step in order, redrawing the progress bar after each one."""
    steps = STEPS if steps is None else steps
    report_progress(0, state.total, "Starting VAPT...")
    for number, step in enumerate(steps, 1):
        section(f"Step {number}: {step.name}")
        state.current_step = step.name
        step.action(state)
        state.completed += 1
        report_progress(state.completed, state.total, step.done)


def failed_outcomes(state):
    return [o for o in state.outcomes if o.status in (RAN_NONZERO, TIMED_OUT)]


def finish(state):
    ctx = state.ctx
    section("Complete")
    ok(f"All done. Results are in directory: {ctx.outdir}")
    if state.archive:
        ok(f"Archive: {state.archive}")

    failed = failed_outcomes(state)
    if failed:
        warn(f"{len(failed)} tool run(s) did not exit cleanly (see run_log.json):")
        for o in failed:
            warn(f"  {o.tool} [{o.artifact}] -> {o.status}")

    print("  Next recommended steps:")
    print("   - Manually run OWASP ZAP active scan and review findings.")
    print(f"   - Review outputs in {ctx.outdir} and capture screenshots for the report.")
    print("   - Encrypt the archive before sending to client (gpg or password zip).")
    report_progress(state.total, state.total, "Finished")


# ─── Main ─────────────────────────────────────────────────────────────────────

def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Automated VAPT runner (recon + web scans) - authorized use only",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
The target and the permission confirmation are asked interactively.

Secrets:
  {WPSCAN_TOKEN_ENV}   wpscan API token (environment or .env file)

Examples:
  python vapt_runner.py
  python vapt_runner.py --output-root ./engagements --timeout 3600
  python vapt_runner.py --wordlist /usr/share/seclists/Discovery/Web-Content/common.txt
  sudo -E python vapt_runner.py --builtin-fallbacks --strict
        """,
    )
    parser.add_argument(
        "--output-root", metavar="DIR", default=".",
        help="Directory in which the VAPT_<target>_<timestamp> folder is created (default: .)"
    )
    parser.add_argument(
        "--wordlist", default=DEFAULT_WORDLIST,
        help=f"Wordlist for gobuster (default: {DEFAULT_WORDLIST})"
    )
    parser.add_argument(
        "--timeout", type=float, default=None, metavar="SECONDS",
        help="Stop any single tool that runs longer than this (default: no limit)"
    )
    parser.add_argument(
        "--builtin-fallbacks", action="store_true",
        help="Use Python (requests/dnspython) instead of curl/dig when those are missing"
    )
    parser.add_argument(
        "--strict", action="store_true",
        help="Exit with status 2 if any tool exited non-zero or timed out"
    )
    args = parser.parse_args(argv)

    load_dotenv()
    banner()

    # ── Consent ───────────────────────────────────────────────────────────────
    target = consent_gate()

    ctx = make_context(target, args.output_root)
    os.makedirs(ctx.outdir, exist_ok=True)
    info(f"Target           : {ctx.target}")
    info(f"Output directory : {ctx.outdir}")

    snapshot_environment(ctx)

    # ── Tool inventory ────────────────────────────────────────────────────────
    section("Tool inventory")
    tools = ToolInventory.probe()
    for name, present in sorted(tools.as_flags().items()):
        if present:
            ok(f"{name:<10} {tools.path(name)}")
        else:
            miss(f"{name:<10} not found")

    # nmap -sV and the NSE scripts want raw sockets on Linux/macOS.
    if sys.platform != "win32" and os.geteuid() != 0:
        warn("Running without root: nmap version detection (-sV) may be limited.")

    state = RunState(
        ctx=ctx,
        tools=tools,
        total=len(STEPS),
        timeout=args.timeout,
        wordlist=args.wordlist,
        builtin_fallbacks=args.builtin_fallbacks,
        wpscan_token=os.getenv(WPSCAN_TOKEN_ENV) or None,
    )

    try:
        run_steps(state)
    except KeyboardInterrupt:
        print()
        warn("Interrupted. The running tool was stopped.")
        warn(f"Partial results are in {ctx.outdir}")
        sys.exit(130)

    finish(state)

    if args.strict and failed_outcomes(state):
        sys.exit(2)


if __name__ == "__main__":
    main()
