from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

from fecsim.engine.module import Module
from fecsim.engine.socket import ElementType

from ._interleaver import Interleaver
from ._puncturer import Puncturer


def _parity(x: int) -> int:
    return bin(x).count("1") & 1


@dataclass(frozen=True)
class Config:
    """
    Rate-1/2 convolutional codec, tail-terminated, soft-input Viterbi decoding.

    constraint/g1/g2 default to the common K=7, (171,133) octal code.
    Codeword: N_cw = 2 * (K + constraint - 1) bits, outputs of g1/g2 interleaved.

    puncture_pattern: 0/1 keep-pattern repeated over the codeword (None -> no puncturing),
      e.g. (1, 1, 1, 0) gives rate ~2/3.
    interleaver: None, "block" or "random" permutation of the codeword bits
      (applied after encoding, removed before decoding).
    """
    constraint: int = 7
    g1: int = 0o171
    g2: int = 0o133
    puncture_pattern: Optional[Tuple[int, ...]] = None
    interleaver: Optional[str] = None
    interleaver_depth: int = 8
    interleaver_seed: int = 0


@dataclass(frozen=True)
class _Trellis:
    constraint: int
    next_state: np.ndarray   # [n_states, 2]
    out: np.ndarray          # [n_states, 2, 2] coded bits per (state, input)
    pred: np.ndarray         # [n_states, 2] predecessors of each state
    pred_out: np.ndarray     # [n_states, 2, 2] coded bits on each incoming branch

    @property
    def n_states(self) -> int:
        return self.next_state.shape[0]


def _build_trellis(constraint: int, g1: int, g2: int) -> _Trellis:
    n_states = 1 << (constraint - 1)
    full_mask = (1 << constraint) - 1
    next_state = np.zeros((n_states, 2), dtype=np.int64)
    out = np.zeros((n_states, 2, 2), dtype=np.int64)

    for s in range(n_states):
        for inp in (0, 1):
            full = ((s << 1) | inp) & full_mask
            next_state[s, inp] = full & (n_states - 1)
            out[s, inp, 0] = _parity(full & g1)
            out[s, inp, 1] = _parity(full & g2)

    # the input bit that led to ns is ns & 1; its two predecessors differ in the dropped MSB
    pred = np.zeros((n_states, 2), dtype=np.int64)
    pred_out = np.zeros((n_states, 2, 2), dtype=np.int64)
    for ns in range(n_states):
        inp = ns & 1
        for msb in (0, 1):
            s = (ns >> 1) | (msb << (constraint - 2))
            pred[ns, msb] = s
            pred_out[ns, msb] = out[s, inp]

    return _Trellis(constraint=constraint, next_state=next_state, out=out, pred=pred, pred_out=pred_out)


def _conv_encode_bits(bits: Sequence[int], trellis: _Trellis) -> np.ndarray:
    tail = trellis.constraint - 1
    seq = list(bits) + [0] * tail
    enc = np.empty(2 * len(seq), dtype=np.int32)
    state = 0
    for i, b in enumerate(seq):
        inp = int(b) & 1
        enc[2 * i] = trellis.out[state, inp, 0]
        enc[2 * i + 1] = trellis.out[state, inp, 1]
        state = trellis.next_state[state, inp]
    return enc


def _viterbi_decode_soft(llr: np.ndarray, trellis: _Trellis) -> Tuple[np.ndarray, float]:
    """
    Maximize sum((1 - 2*c) * L) over trellis paths, L = log(P(0)/P(1)).
    Punctured positions carry L = 0 and do not bias the metric.
    Returns (decoded bits including tail, final metric of state 0).
    """
    if llr.size % 2 != 0:
        raise ValueError("rx LLR length must be even (rate 1/2 pairs)")

    n_steps = llr.size // 2
    pairs = llr.reshape(n_steps, 2).astype(np.float64)
    sign = 1.0 - 2.0 * trellis.pred_out  # [n_states, 2, 2]

    metric = np.full(trellis.n_states, -np.inf)
    metric[0] = 0.0
    back = np.empty((n_steps, trellis.n_states), dtype=np.int64)
    p0, p1 = trellis.pred[:, 0], trellis.pred[:, 1]

    for i in range(n_steps):
        bm = sign @ pairs[i]  # [n_states, 2]
        c0 = metric[p0] + bm[:, 0]
        c1 = metric[p1] + bm[:, 1]
        take1 = c1 > c0
        metric = np.where(take1, c1, c0)
        back[i] = np.where(take1, p1, p0)

    decoded = np.empty(n_steps, dtype=np.int32)
    s = 0
    for i in range(n_steps - 1, -1, -1):
        decoded[i] = s & 1
        s = back[i, s]
    return decoded, float(metric[0])


class Encoder(Module):
    def __init__(self, K: int, trellis: _Trellis, interleaver: Optional[Interleaver], name: str = "encoder"):
        super().__init__(name)
        self.K = K
        self.N_cw = 2 * (K + trellis.constraint - 1)
        self._trellis = trellis
        self._interleaver = interleaver

        t = self.create_task("encode", self._encode)
        t.create_socket_in("U_K", K, ElementType.INT32)
        t.create_socket_out("X_N", self.N_cw, ElementType.INT32)

    def _encode(self, u_k: np.ndarray, x_n: np.ndarray) -> None:
        enc = _conv_encode_bits(u_k, self._trellis)
        if self._interleaver is not None:
            enc = self._interleaver.interleave(enc)
        x_n[:] = enc


class Decoder(Module):
    """
    decode_siho: soft LLRs in (Y_N), hard bits out (V_K).
    """

    def __init__(self, K: int, trellis: _Trellis, interleaver: Optional[Interleaver], name: str = "decoder"):
        super().__init__(name)
        self.K = K
        self.N_cw = 2 * (K + trellis.constraint - 1)
        self._trellis = trellis
        self._interleaver = interleaver
        self.last_path_metric: Optional[float] = None

        t = self.create_task("decode_siho", self._decode_siho)
        t.create_socket_in("Y_N", self.N_cw, ElementType.FLOAT32)
        t.create_socket_out("V_K", K, ElementType.INT32)

    def reset(self) -> None:
        self.last_path_metric = None

    def _decode_siho(self, y_n: np.ndarray, v_k: np.ndarray) -> None:
        llr = y_n
        if self._interleaver is not None:
            llr = self._interleaver.deinterleave(llr)
        decoded, self.last_path_metric = _viterbi_decode_soft(llr, self._trellis)
        v_k[:] = decoded[: self.K]


class Codec:
    """
    Encoder, decoder and puncturer of one code, plus its optional interleaver.

    K: information bits per frame (encoder input)
    N_cw: encoder output length; N: transmitted length after puncturing
    """

    def __init__(self, K: int, cfg: Any):
        constraint, g1, g2 = _get_params(cfg)
        self.K = K
        trellis = _build_trellis(constraint, g1, g2)
        N_cw = 2 * (K + constraint - 1)

        self.interleaver: Optional[Interleaver] = None
        if cfg.interleaver is not None:
            self.interleaver = Interleaver(
                N_cw, cfg.interleaver, depth=cfg.interleaver_depth, seed=cfg.interleaver_seed
            )

        self.encoder = Encoder(K, trellis, self.interleaver)
        self.decoder = Decoder(K, trellis, self.interleaver)
        self.puncturer = Puncturer(N_cw, cfg.puncture_pattern)

    @property
    def N_cw(self) -> int:
        return self.encoder.N_cw

    @property
    def N(self) -> int:
        return self.puncturer.N

    @property
    def rate(self) -> float:
        return self.K / self.N

    @property
    def modules(self) -> List[Module]:
        return [self.encoder, self.puncturer, self.decoder]

    def has_interleaver(self) -> bool:
        return self.interleaver is not None

    def get_interleaver(self) -> Interleaver:
        if self.interleaver is None:
            raise LookupError("this codec has no interleaver; check has_interleaver() first")
        return self.interleaver

    def set_noise(self, noise) -> None:
        self.decoder.set_noise(noise)

    def reset(self) -> None:
        self.decoder.reset()


def _get_params(cfg: Any) -> Tuple[int, int, int]:
    constraint = getattr(cfg, "constraint", None)
    g1 = getattr(cfg, "g1", None)
    g2 = getattr(cfg, "g2", None)

    for name, v in (("constraint", constraint), ("g1", g1), ("g2", g2)):
        if v is None:
            raise AttributeError(f"cfg missing required attribute: {name}")
        if not isinstance(v, int):
            raise TypeError(f"cfg.{name} must be int")

    if constraint < 2 or constraint > 15:
        raise ValueError("cfg.constraint must be in [2,15] for practicality")
    if g1 <= 0 or g2 <= 0:
        raise ValueError("cfg.g1 and cfg.g2 must be > 0")
    return constraint, g1, g2


def build(cfg: Any, *, K: int) -> Codec:
    return Codec(K, cfg)
