from ._parameter_tree import ParameterTree, as_tree, as_vector_space

__all__ = [ParameterTree.__name__, as_tree.__name__, as_vector_space.__name__]
