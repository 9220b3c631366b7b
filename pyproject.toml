[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "meshfilter"
version = "0.1.0"
description = "Build Envoy matcher, RBAC, route and Redis cluster configuration for service-mesh protocols such as Dubbo, Thrift, Redis and MetaProtocol"
requires-python = ">=3.10"
dependencies = []
keywords = ["envoy", "service-mesh", "istio", "dubbo", "thrift", "redis", "rbac", "xds"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["meshfilter"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
