import matplotlib

# Plotting tests must not open windows
matplotlib.use("Agg")
