from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from fecsim.monitor.bfer import Config as MonitorConfig
from fecsim.stages.channel.stage import Config as ChannelStageConfig
from fecsim.stages.codec.stage import Config as CodecStageConfig
from fecsim.stages.crc.stage import Config as CRCStageConfig
from fecsim.stages.modem.stage import Config as ModemStageConfig
from fecsim.stages.source.stage import Config as SourceStageConfig
from fecsim.sweep.driver import Config as SweepConfig


@dataclass(frozen=True)
class ChainConfig:
    """
    End-to-end BFER chain configuration.

    Per-frame task order:
      source.generate -> crc.build -> encoder.encode -> puncturer.puncture
      -> modem.modulate -> channel.add_noise -> modem.demodulate
      -> puncturer.depuncture -> decoder.decode_siho -> crc.extract
      -> monitor.check_errors

    K: information bits emitted by the source per frame (before CRC).

    Task flags (applied to every task):
      debug / debug_limit: dump socket heads through logging at DEBUG level
      stats: collect per-task timing
      fast: skip buffer validation; None -> fast unless debug or stats
    """
    K: int = 32
    source: SourceStageConfig = field(default_factory=SourceStageConfig)
    crc: CRCStageConfig = field(default_factory=CRCStageConfig)
    codec: CodecStageConfig = field(default_factory=CodecStageConfig)
    modem: ModemStageConfig = field(default_factory=ModemStageConfig)
    channel: ChannelStageConfig = field(default_factory=ChannelStageConfig)
    monitor: MonitorConfig = field(default_factory=MonitorConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)

    debug: bool = False
    debug_limit: int = 16
    stats: bool = False
    fast: Optional[bool] = None
