from .weak_hamiltonian import WeakHamiltonianEye, WeakHamiltonianPar, SubDiagramCache, run_from_param

__all__ = ['WeakHamiltonianEye', 'WeakHamiltonianPar', 'SubDiagramCache', 'run_from_param']
