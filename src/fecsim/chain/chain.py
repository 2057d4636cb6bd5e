from __future__ import annotations

import logging
from typing import List, Optional, TextIO

from fecsim.chain.config import ChainConfig
from fecsim.engine.module import Module
from fecsim.engine.sequence import Sequence, configure_tasks
from fecsim.monitor import bfer
from fecsim.stages.channel import stage as channel_stage
from fecsim.stages.codec import stage as codec_stage
from fecsim.stages.crc import stage as crc_stage
from fecsim.stages.modem import stage as modem_stage
from fecsim.stages.source import stage as source_stage
from fecsim.sweep.driver import PointResult, Sweep
from fecsim.tools.interrupt import Interrupt
from fecsim.tools.stats import show_stats
from fecsim.tools.terminal import BFERReporter, NoiseReporter, Terminal, ThroughputReporter

logger = logging.getLogger(__name__)


class Chain:
    """
    Builds, wires and drives the full simulation chain described by ChainConfig.

    All binding happens in __init__: a Chain that constructed successfully has
    a fully validated graph.
    """

    def __init__(
        self,
        cfg: ChainConfig,
        *,
        stream: Optional[TextIO] = None,
        terminal: bool = True,
        interrupt: Optional[Interrupt] = None,
    ):
        if not isinstance(cfg.K, int) or cfg.K <= 0:
            raise ValueError(f"ChainConfig.K must be a positive int, got {cfg.K!r}")
        self.cfg = cfg

        self.source = source_stage.build(cfg.source, K=cfg.K)
        self.crc = crc_stage.build(cfg.crc, K=cfg.K)
        self.codec = codec_stage.build(cfg.codec, K=cfg.K + self.crc.size)
        self.modem = modem_stage.build(cfg.modem, N=self.codec.N)
        self.channel = channel_stage.build(cfg.channel, N=self.codec.N)
        self.monitor = bfer.build(cfg.monitor, K=cfg.K)

        self._bind()
        self._init_interleaver()

        # decoder memory is per frame
        self.monitor.add_handler_check(self.codec.reset)

        enc, pct, dec = self.codec.encoder, self.codec.puncturer, self.codec.decoder
        self.sequence = Sequence([
            self.source["generate"],
            self.crc["build"],
            enc["encode"],
            pct["puncture"],
            self.modem["modulate"],
            self.channel["add_noise"],
            self.modem["demodulate"],
            pct["depuncture"],
            dec["decode_siho"],
            self.crc["extract"],
            self.monitor["check_errors"],
        ])
        self._configure_tasks()

        self.noise_reporter = NoiseReporter()
        self.terminal: Optional[Terminal] = None
        if terminal:
            self.terminal = Terminal(
                [self.noise_reporter, BFERReporter(self.monitor), ThroughputReporter(self.monitor)],
                stream=stream,
            )

        self.sweep = Sweep(
            cfg.sweep,
            self.sequence,
            self.monitor,
            rate=self.codec.rate,
            noise_consumers=[self.codec, self.modem, self.channel, self.noise_reporter],
            terminal=self.terminal,
            interrupt=interrupt,
        )

    @property
    def modules(self) -> List[Module]:
        return [
            self.source, self.crc, self.codec.encoder, self.codec.puncturer,
            self.modem, self.channel, self.codec.decoder, self.monitor,
        ]

    def _bind(self) -> None:
        enc, pct, dec = self.codec.encoder, self.codec.puncturer, self.codec.decoder
        self.crc["build::U_K1"].bind(self.source["generate::U_K"])
        enc["encode::U_K"].bind(self.crc["build::U_K2"])
        pct["puncture::X_N1"].bind(enc["encode::X_N"])
        self.modem["modulate::X_N1"].bind(pct["puncture::X_N2"])
        self.channel["add_noise::X_N"].bind(self.modem["modulate::X_N2"])
        self.modem["demodulate::Y_N1"].bind(self.channel["add_noise::Y_N"])
        pct["depuncture::Y_N1"].bind(self.modem["demodulate::Y_N2"])
        dec["decode_siho::Y_N"].bind(pct["depuncture::Y_N2"])
        self.crc["extract::V_K1"].bind(dec["decode_siho::V_K"])
        self.monitor["check_errors::U"].bind(self.source["generate::U_K"])
        self.monitor["check_errors::V"].bind(self.crc["extract::V_K2"])

    def _init_interleaver(self) -> None:
        if self.codec.has_interleaver():
            self.codec.get_interleaver().init()
        else:
            logger.debug("codec '%s' has no interleaver; skipping init", self.cfg.codec.module)

    def _configure_tasks(self) -> None:
        c = self.cfg
        fast = c.fast if c.fast is not None else not (c.debug or c.stats)
        # every task of every module, crc::check included although it is not scheduled
        configure_tasks(
            (t for m in self.modules for t in m.tasks),
            fast=fast, debug=c.debug, debug_limit=c.debug_limit, stats=c.stats,
        )

    def reset(self) -> None:
        for m in self.modules:
            m.reset()

    def run(self) -> List[PointResult]:
        return self.sweep.run()

    def stats_table(self, ordered: bool = True) -> str:
        return show_stats(self.modules, ordered=ordered)
