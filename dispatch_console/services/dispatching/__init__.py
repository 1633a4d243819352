from dispatch_console.services.dispatching.dispatch_service import DispatchService

__all__ = ['DispatchService']
