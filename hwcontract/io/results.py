import os
import typing as t
from dataclasses import dataclass, field

import h5py
import numpy as np


def result_file_name(output: str) -> str:
    return output if output.endswith(".h5") else f"{output}.h5"


@dataclass
class Result:
    """Correlator of one diagram together with the inputs it was built from.

    Attributes
    ----------
    name: str
        Diagram label, e.g. ``HW_S`` or ``HW_E``.
    corr: ndarray
        Complex correlator indexed by time.
    q1, q2, q3, q4: str
        Names of the propagators used in the contraction.
    tSnk: int
        Sink time slice of `q1`.
    """

    name: str
    corr: np.ndarray
    q1: str = ""
    q2: str = ""
    q3: str = ""
    q4: str = ""
    tSnk: int = 0
    metadata: t.Dict[str, t.Any] = field(default_factory=dict)

    @property
    def inputs(self) -> t.Dict[str, str]:
        return {"q1": self.q1, "q2": self.q2, "q3": self.q3, "q4": self.q4}


class ResultWriter:
    """Writes lists of `Result` to an HDF5 file, one top-level group per call."""

    def __init__(self, filename: str):
        self.filename = result_file_name(filename)

    def write(self, key: str, results: t.List[Result]):
        dirname = os.path.dirname(self.filename)
        if dirname:
            os.makedirs(dirname, exist_ok=True)
        with h5py.File(self.filename, "a") as f:
            if key in f:
                del f[key]
            group = f.create_group(key)
            for index, res in enumerate(results):
                sub = group.create_group(res.name)
                sub.create_dataset("corr", data=np.asarray(res.corr, dtype=np.complex128))
                sub.attrs["index"] = index
                for k, v in res.inputs.items():
                    sub.attrs[k] = v
                sub.attrs["tSnk"] = res.tSnk
                for k, v in res.metadata.items():
                    sub.attrs[k] = v
        return self.filename


def read_results(filename: str, key: str) -> t.List[Result]:
    results = []
    with h5py.File(result_file_name(filename), "r") as f:
        group = f[key]
        names = sorted(group.keys(), key=lambda n: group[n].attrs["index"])
        for name in names:
            sub = group[name]
            attrs = {k: v for k, v in sub.attrs.items() if k not in ["index", "q1", "q2", "q3", "q4", "tSnk"]}
            results.append(
                Result(
                    name=name,
                    corr=sub["corr"][()],
                    q1=str(sub.attrs["q1"]),
                    q2=str(sub.attrs["q2"]),
                    q3=str(sub.attrs["q3"]),
                    q4=str(sub.attrs["q4"]),
                    tSnk=int(sub.attrs["tSnk"]),
                    metadata=attrs,
                )
            )
    return results
