from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Union

from fecsim.engine.socket import Socket
from fecsim.engine.task import Codelet, Task

if TYPE_CHECKING:
    from fecsim.tools.noise import Noise


class Module:
    """
    Named collection of tasks sharing state.

    Lookup:
      module["encode"]        -> Task
      module["encode::X_N"]   -> Socket
    """

    def __init__(self, name: str):
        if not isinstance(name, str) or not name:
            raise ValueError("module name must be a non-empty string")
        self.name = name
        self.tasks: List[Task] = []
        self.noise: Optional["Noise"] = None

    def create_task(self, name: str, codelet: Optional[Codelet] = None) -> Task:
        if any(t.name == name for t in self.tasks):
            raise ValueError(f"module {self.name}: duplicate task name '{name}'")
        t = Task(self, name, codelet)
        self.tasks.append(t)
        return t

    def task(self, name: str) -> Task:
        for t in self.tasks:
            if t.name == name:
                return t
        raise KeyError(f"module {self.name} has no task '{name}'")

    def __getitem__(self, key: str) -> Union[Task, Socket]:
        if "::" in key:
            task_name, sock_name = key.split("::", 1)
            return self.task(task_name)[sock_name]
        return self.task(key)

    def set_noise(self, noise: "Noise") -> None:
        self.noise = noise

    def reset(self) -> None:
        """Clear state accumulated across frames. No-op by default."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, tasks={[t.name for t in self.tasks]})"
