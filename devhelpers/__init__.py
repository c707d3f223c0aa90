# Copyright (c) 2026 Pyry Haulos
#
# This software is released under the MIT License.
# https://opensource.org/licenses/MIT

"""Shell helper functions for git, GitHub and MySQL as a single CLI."""
