import logging

from fecsim.chain.chain import Chain
from fecsim.chain.config import ChainConfig
from fecsim.monitor.bfer import Config as MonitorConfig
from fecsim.stages.codec.stage import Config as CodecStageConfig
from fecsim.stages.codec.modules.conv_k7_r12 import Config as ConvConfig
from fecsim.sweep.driver import Config as SweepConfig


if __name__ == "__main__":
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")

    cfg = ChainConfig(
        K=64,
        codec=CodecStageConfig(
            module="conv_k7_r12",
            module_cfg=ConvConfig(puncture_pattern=(1, 1, 1, 0), interleaver="random"),
        ),
        monitor=MonitorConfig(max_fe=100, max_frames=20_000),
        sweep=SweepConfig(ebn0_min=0.0, ebn0_max=2.1, ebn0_step=0.1, report_frequency_s=0.5),
        stats=True,
    )

    print("#-------------------------------------------------------")
    print("# BFER simulation of a punctured K=7 convolutional code")
    print("#-------------------------------------------------------")
    print("#")

    chain = Chain(cfg)
    print(f"# K={cfg.K} (+{chain.crc.size} CRC)  N_cw={chain.codec.N_cw}  N={chain.codec.N}  R={chain.codec.rate:.4f}")
    print("#")

    chain.run()

    print("#")
    print(chain.stats_table(ordered=True))
    print("# End of the simulation")
