from typing import Sequence


class Config:
    """Tunable parameters shared by the constraint checker, the cost evaluator, the comparator and the solver.

    Args:
        mips_ceiling: Fraction of a node's MIPS usable by placed modules
        ram_ceiling: Fraction of a node's RAM usable by placed modules
        storage_ceiling: Fraction of a node's storage usable by placed modules
        bandwidth_ceiling: Fraction of a link's bandwidth usable by tuple traffic
        migration_bandwidth_share: Fraction of a link's bandwidth available to module migrations
        setup_vm_time: Seconds added to the migration time of every module that moves
        priorities: Priority of each objective, larger values are compared first
        relative_tolerances: Relative difference below which two values of an objective are considered equal
    """

    QOS_COST = 0
    POWER_COST = 1
    PROCESSING_COST = 2
    BANDWIDTH_COST = 3
    MIGRATION_COST = 4
    NR_OBJECTIVES = 5
    OBJECTIVE_NAMES = ("QoS", "Power", "Processing", "Bandwidth", "Migration")

    def __init__(self, mips_ceiling: float = 0.95, ram_ceiling: float = 0.95, storage_ceiling: float = 0.95,
                 bandwidth_ceiling: float = 0.8, migration_bandwidth_share: float = 0.2, setup_vm_time: float = 10.0,
                 priorities: Sequence[int] = (5, 4, 3, 2, 1), relative_tolerances: Sequence[float] = (0, 0, 0, 0, 0)):
        for name, value in [("mips_ceiling", mips_ceiling), ("ram_ceiling", ram_ceiling),
                            ("storage_ceiling", storage_ceiling), ("bandwidth_ceiling", bandwidth_ceiling),
                            ("migration_bandwidth_share", migration_bandwidth_share)]:
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}.")
        if setup_vm_time < 0:
            raise ValueError(f"setup_vm_time must not be negative, got {setup_vm_time}.")
        if len(priorities) != self.NR_OBJECTIVES or len(set(priorities)) != self.NR_OBJECTIVES:
            raise ValueError(f"Expected {self.NR_OBJECTIVES} distinct priorities, got {priorities}.")
        if len(relative_tolerances) != self.NR_OBJECTIVES or any(t < 0 for t in relative_tolerances):
            raise ValueError(f"Expected {self.NR_OBJECTIVES} non-negative tolerances, got {relative_tolerances}.")

        self.mips_ceiling = mips_ceiling
        self.ram_ceiling = ram_ceiling
        self.storage_ceiling = storage_ceiling
        self.bandwidth_ceiling = bandwidth_ceiling
        self.migration_bandwidth_share = migration_bandwidth_share
        self.setup_vm_time = setup_vm_time
        self.priorities = tuple(priorities)
        self.relative_tolerances = tuple(relative_tolerances)

    @property
    def objective_order(self) -> Sequence[int]:
        """Objective indices from the highest to the lowest priority."""
        return sorted(range(self.NR_OBJECTIVES), key=lambda i: self.priorities[i], reverse=True)
