from .reference import load_dense, save_dense
