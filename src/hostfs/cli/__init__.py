#
# SPDX-FileCopyrightText: Copyright (c) 2025 provide.io llc. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
#

"""Command line interface for hostfs."""

from hostfs.cli.main import cli

__all__ = ["cli"]

# 🔼⚙️🔚
