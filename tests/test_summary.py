import os
import tarfile
import zipfile

import vapt_runner
from vapt_runner import StepOutcome, archive_results, write_summary


def test_summary_lists_tools_outcomes_and_notes(make_state):
    state = make_state(tools=["nmap"])
    state.outcomes.append(StepOutcome(step="WHOIS", tool="whois", artifact="whois.txt",
                                      status="skipped-missing-dependency"))
    state.outcomes.append(StepOutcome(step="Nmap", tool="nmap", artifact="nmap_full.nmap",
                                      status="ran-with-nonzero-exit", exit_code=1))

    write_summary(state)

    with open(state.ctx.artifact("SUMMARY.txt"), encoding="utf-8") as fh:
        text = fh.read()
    assert text.startswith("VAPT run summary\nTarget: example.com\nTimestamp: 20240102_030405\n")
    assert "nmap : 1" in text
    assert "WHOIS / whois -> skipped-missing-dependency [whois.txt]" in text
    assert "Nmap / nmap -> ran-with-nonzero-exit (exit 1) [nmap_full.nmap]" in text
    for note in vapt_runner.ADVISORY_NOTES:
        assert note in text


def test_archive_contains_the_whole_directory(make_state):
    state = make_state()
    with open(state.ctx.artifact("SUMMARY.txt"), "w") as fh:
        fh.write("summary\n")

    archive = archive_results(state.ctx.outdir)

    assert archive == os.path.abspath(state.ctx.outdir) + ".zip"
    dirname = os.path.basename(state.ctx.outdir)
    with zipfile.ZipFile(archive) as zf:
        assert f"{dirname}/SUMMARY.txt" in zf.namelist()


def test_archive_falls_back_to_tarball(make_state, monkeypatch):
    state = make_state()
    with open(state.ctx.artifact("SUMMARY.txt"), "w") as fh:
        fh.write("summary\n")

    real = vapt_runner.shutil.make_archive

    def no_zip(base_name, fmt, **kwargs):
        if fmt == "zip":
            raise RuntimeError("zlib not available")
        return real(base_name, fmt, **kwargs)
    monkeypatch.setattr(vapt_runner.shutil, "make_archive", no_zip)

    archive = archive_results(state.ctx.outdir)

    assert archive.endswith(".tar.gz")
    dirname = os.path.basename(state.ctx.outdir)
    with tarfile.open(archive) as tf:
        assert f"{dirname}/SUMMARY.txt" in tf.getnames()


def test_archive_failure_is_not_fatal(make_state, monkeypatch, capsys):
    state = make_state()

    def broken(base_name, fmt, **kwargs):
        raise OSError("disk full")
    monkeypatch.setattr(vapt_runner.shutil, "make_archive", broken)

    assert archive_results(state.ctx.outdir) is None
    assert "Could not create gztar archive" in capsys.readouterr().out
