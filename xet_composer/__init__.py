# Copyright 2026 Pramod Kumar Voola
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

# -----------------------------------------------------------------------------
# XET COMPOSER
# -----------------------------------------------------------------------------
# Parameterize a contract template, compile it with solc, deploy it, and
# return the deployed address and ABI.
#
# Layers:
# - domain: Pydantic data model shared by every stage
# - core:   Validator, Renderer, Deployer, Pipeline
# - infra:  solc subprocess, JSON-RPC node, signer capabilities
# -----------------------------------------------------------------------------

__version__ = "0.1.0"
