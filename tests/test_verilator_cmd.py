"""Tests for the per-step command lines."""

from vtest.verilator_cmd import (get_build_cmd, get_make_cmd,
                                 get_makefile_name, get_run_cmd,
                                 get_verilator_cmd)
from vtest.vtest_config import load_config


def test_verilator_cmd_defaults(project):
    work = str(project)
    cfg = load_config("default", work)

    assert get_verilator_cmd(cfg, work) == [
        "verilator", "--cc", "--exe", "-sv",
        "-o", f"{work}/test",
        "--vpi",
        "--top-module", "TestModule",
        "verilator_main.cc", "test.v",
        f"+incdir+{work}/../vsrc",
        f"{work}/../target/release/libdpi_memory.1.so",
        "-CFLAGS", "-DVERILATOR",
        "-CFLAGS", "-fPIC",
        "-CFLAGS", f"-I{work}/../csrc",
        "-CFLAGS", f"-I{work}",
        "-LDFLAGS", f"-Wl,-rpath={work}/../target/release",
    ]


def test_verilator_cmd_extra_sources_and_args(project):
    work = str(project)
    cfg = load_config("default", work)
    cfg.verilator_args = ["--trace"]

    cmd = get_verilator_cmd(cfg, work, extra_sources=["/src/extra.cc"])

    assert cmd.index("/src/extra.cc") == cmd.index("test.v") + 1
    assert cmd[-1] == "--trace"


def test_make_cmd(project):
    cfg = load_config("default", str(project))
    assert get_makefile_name(cfg) == "VTestModule.mk"
    assert get_make_cmd(cfg) == ["make", "-C", "obj_dir", "-f",
                                 "VTestModule.mk"]


def test_make_cmd_follows_top_module_and_jobs(project):
    cfg = load_config("default", str(project))
    cfg.top_module = "Top"
    cfg.make_jobs = 8
    assert get_make_cmd(cfg) == ["make", "-C", "obj_dir", "-f", "VTop.mk",
                                 "-j", "8"]


def test_run_cmd(project):
    cfg = load_config("default", str(project))
    assert get_run_cmd(cfg) == ["./test"]

    cfg.sim_args = ["+seed=3"]
    assert get_run_cmd(cfg) == ["./test", "+seed=3"]


def test_build_cmd_is_a_copy(project):
    cfg = load_config("default", str(project))
    cmd = get_build_cmd(cfg)
    assert cmd == ["./build.sh"]

    cmd.append("--release")
    assert cfg.build_cmd == ["./build.sh"]
