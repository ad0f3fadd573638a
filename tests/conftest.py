import matplotlib

# Analysis helpers draw figures; keep them off-screen during tests.
matplotlib.use("Agg")
