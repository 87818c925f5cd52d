"""WSGI adapter serving the join page through the same request processing as CGI."""

from join_system.cgi_wrapper import process_request


def make_app(config=None):
    def application(environ, start_response):
        response = process_request(environ, environ['wsgi.input'], config)
        headers = response.headers + [('Content-Length', str(len(response.body)))]
        start_response(response.status_line, headers)
        return [response.body]

    return application


application = make_app()
