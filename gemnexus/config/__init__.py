# Copyright 2025 Roger Cibrian
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Configuration persistence for gemnexus.

This package stores per-repository settings (URL, SSL verification mode,
stored authorization) in a YAML file, with optional encryption of the
stored authorizations and an optional separate secrets file.

Public API:

- ConfigStore: The key/value store backing one configuration file
- RepositoryConfig: Handle onto one repository slot of a store
- SslVerifyMode: TLS verification mode (PEER or NONE)
- default_file: Configuration file used when none is given

Example:
    Basic usage:

        from gemnexus.config import ConfigStore

        store = ConfigStore()
        config = store.get("internal")
        print(config.url)

"""

from .store import (
    DEFAULT_REPO,
    ConfigStore,
    RepositoryConfig,
    SslVerifyMode,
    default_file,
)

__all__ = [
    "DEFAULT_REPO",
    "ConfigStore",
    "RepositoryConfig",
    "SslVerifyMode",
    "default_file",
]
