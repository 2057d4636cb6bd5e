from __future__ import annotations

from dataclasses import replace
from typing import List, Tuple

import numpy as np

from fecsim.chain.config import ChainConfig
from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType
from fecsim.engine.task import Task
from fecsim.monitor.bfer import Config as MonitorConfig
from fecsim.stages.channel.stage import Config as ChannelStageConfig
from fecsim.sweep.driver import Config as SweepConfig


def bytes_to_bits_msb(data: bytes) -> List[int]:
    out: List[int] = []
    for b in data:
        for i in range(7, -1, -1):
            out.append((b >> i) & 1)
    return out


def linear_pipeline(n_tasks: int, count: int = 8) -> Tuple[List[Module], List[Task], List[str]]:
    """
    n_tasks modules wired in a line: stage0 writes 0..count-1, every later stage adds 1.
    Returns (modules, tasks in pipeline order, call log).
    """
    calls: List[str] = []
    modules: List[Module] = []
    tasks: List[Task] = []

    for i in range(n_tasks):
        m = Module(f"stage{i}")
        if i == 0:
            def produce(out, _name=m.name):
                calls.append(_name)
                out[:] = np.arange(out.size, dtype=out.dtype)

            t = m.create_task("run", produce)
        else:
            def step(inp, out, _name=m.name):
                calls.append(_name)
                out[:] = inp + 1

            t = m.create_task("run", step)
            t.create_socket_in("in", count, ElementType.INT32)
        t.create_socket_out("out", count, ElementType.INT32)

        if tasks:
            t["in"].bind(tasks[-1]["out"])
        modules.append(m)
        tasks.append(t)

    return modules, tasks, calls


def small_chain_cfg(**overrides) -> ChainConfig:
    """
    Tiny, fast chain: 16 info bits, one-point sweep, no temp report, no SIGINT hook.
    """
    cfg = ChainConfig(
        K=16,
        channel=ChannelStageConfig(module="noiseless"),
        monitor=MonitorConfig(max_fe=5, max_frames=10),
        sweep=SweepConfig(ebn0_min=4.0, ebn0_max=5.0, ebn0_step=1.0, report_frequency_s=0.0, catch_sigint=False),
    )
    return replace(cfg, **overrides)
