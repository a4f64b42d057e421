import setuptools
from pathlib import Path

ROOT = Path(__file__).parent


def read_requirements(filename: str = "requirements.txt") -> list[str]:
    req_path = ROOT / filename
    if not req_path.exists():
        return []
    reqs: list[str] = []
    for line in req_path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        reqs.append(line)
    return reqs


readme = ROOT / "README.md"
long_description = readme.read_text(encoding="utf-8") if readme.exists() else ""

setuptools.setup(
    name="treeopt",
    version="0.1.0",
    description=(
        "Gradient-based optimizers (momentum/Nesterov SGD, Adam, Riemannian SGD) "
        "over arbitrarily nested NumPy parameter trees."
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=read_requirements(),
    extras_require={"test": ["pytest>=7"]},
    include_package_data=True,
    zip_safe=False,
)
