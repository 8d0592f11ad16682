from setuptools import find_packages, setup
import coldstd
import io


with io.open("README.md", encoding="utf-8") as f:
    long_description = f.read()

with io.open("requirements.txt", encoding="utf-8") as f:
    requirements = [r for r in f.read().split('\n') if len(r)]

setup(name="coldstd",
      version=coldstd.__version__,
      description="Standard single-key output descriptors and key derivation for cold wallets",
      long_description=long_description,
      long_description_content_type="text/markdown",
      license="MIT",
      packages=find_packages(exclude=["tests"]),
      python_requires=">=3.7",
      keywords=["bitcoin", "descriptor", "bip32", "taproot", "wallet"],
      install_requires=requirements,
      extras_require={"tests": ["pytest"]})
