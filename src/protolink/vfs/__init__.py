from protolink.vfs.tree import ROOT, VirtualFileTree

__all__ = ["ROOT", "VirtualFileTree"]
