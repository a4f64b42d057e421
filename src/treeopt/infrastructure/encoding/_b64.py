from __future__ import annotations

import base64
from typing import Any, Dict

import numpy as np


def ndarray_to_payload(arr: np.ndarray) -> Dict[str, Any]:
    """
    Serialize a NumPy ndarray into a JSON-safe payload.

    The raw C-order bytes are stored, so decoding reproduces the array
    bit-for-bit (including NaN payloads and signed zeros).

    Returns
    -------
    dict
        {
          "b64": "<base64>",
          "dtype": "<numpy dtype str>",
          "shape": [...],
        }
    """
    a = np.ascontiguousarray(arr)
    return {
        "b64": base64.b64encode(a.tobytes(order="C")).decode("ascii"),
        "dtype": a.dtype.str,  # e.g. "<f8"
        "shape": list(a.shape),
    }


def payload_to_ndarray(payload: Dict[str, Any]) -> np.ndarray:
    """
    Deserialize a payload produced by `ndarray_to_payload`.

    Raises
    ------
    ValueError
        If the byte count does not match the declared dtype and shape.
    """
    raw = base64.b64decode(str(payload["b64"]).encode("ascii"))
    dtype = np.dtype(str(payload["dtype"]))
    shape = tuple(int(x) for x in payload["shape"])

    expected = int(np.prod(shape, dtype=np.int64)) * dtype.itemsize
    if len(raw) != expected:
        raise ValueError(
            f"Payload holds {len(raw)} bytes, expected {expected} for "
            f"dtype={dtype.str} shape={shape}"
        )

    # frombuffer returns a read-only view on `raw`; copy into an owning array.
    return np.frombuffer(raw, dtype=dtype).reshape(shape).copy()
