"""Progress Monitor package.

Field presence verification and progress integrity engine for government
construction projects. Organized by feature modules (geo, visits, progress,
rollup, risk, ...) with a thin Flask controller layer over service/repository
layers.
"""
